import ctypes
import logging
import time

from picosdk.constants import PICO_INFO, PICO_STATUS
from picosdk.functions import assert_pico_ok

from . import constants as c
from .conversion import mv_to_adc
from .exceptions import CaptureTimeoutError
from .settings import ChannelSettings

logger = logging.getLogger(__name__)


class PicoScope4000():
    def __init__(self, serial=None, driver=None, connect=True):
        '''
        Connect the instrument. If serial is None the driver opens the first
        device found that is not already in use.

        driver is the ps4000 binding object; it is loaded from picosdk (after
        configuring the library paths) when not given.
        '''
        if driver is None:
            from .paths import load_driver
            driver = load_driver()
        self.ps = driver
        self.serial = serial
        self.handle = ctypes.c_int16()
        self.status = {}
        self._variant = None
        if connect:
            self.connect()


    def connect(self):
        if self.serial is None:
            self.status["openunit"] = self.ps.ps4000OpenUnit(ctypes.byref(self.handle))
        else:
            serial = ctypes.create_string_buffer(self.serial.encode())
            self.status["openunit"] = self.ps.ps4000OpenUnitEx(ctypes.byref(self.handle), serial)
        assert_pico_ok(self.status["openunit"])
        logger.info('Device connected (handle %d, model %s)', self.handle.value, self.variant)


    def disconnect(self):
        self.status["close"] = self.ps.ps4000CloseUnit(self.handle)
        assert_pico_ok(self.status["close"])
        logger.info('Device disconnected.')


    def stop(self):
        '''
        Stop the device. Call it after every capture, also when auto stop is
        enabled.
        '''
        self.status["stop"] = self.ps.ps4000Stop(self.handle)
        assert_pico_ok(self.status["stop"])
        logger.info('Device stopped.')


    def available_devices(self):
        count = ctypes.c_int16(0)
        serials = ctypes.create_string_buffer(256)
        serial_length = ctypes.c_int16(256)
        self.status["enumerateUnits"] = self.ps.ps4000EnumerateUnits(ctypes.byref(count),
                                                                    serials,
                                                                    ctypes.byref(serial_length))
        assert_pico_ok(self.status["enumerateUnits"])
        if count.value == 0:
            return []
        return serials.value.decode().split(',')[:count.value]


    def get_unit_info(self, info):
        if isinstance(info, str):
            info = PICO_INFO[info]
        string = ctypes.create_string_buffer(255)
        required_size = ctypes.c_int16(0)
        self.status["getUnitInfo"] = self.ps.ps4000GetUnitInfo(self.handle,
                                                              string,
                                                              ctypes.c_int16(255),
                                                              ctypes.byref(required_size),
                                                              info)
        assert_pico_ok(self.status["getUnitInfo"])
        return string.value.decode()


    def unit_info(self):
        return {name: self.get_unit_info(name) for name in c.PS4000_INFO_LINES}


    @property
    def variant(self):
        if self._variant is None:
            self._variant = self.get_unit_info('PICO_VARIANT_INFO')
        return self._variant


    @property
    def channel_count(self):
        return c.channel_count(self.variant)


    @property
    def max_adc(self):
        return c.max_adc_value(self.variant)


    def set_channel(self, channel):
        '''
        Set a channel of the connected picoscope from a ChannelSettings.
        Available channels are PS4000_CHANNEL_A ... PS4000_CHANNEL_B (2 channel
        models) or PS4000_CHANNEL_D (4 channel models), ranges go from
        PS4000_10MV to PS4000_100V.
        '''
        channel.validate()
        key = f"setCh{channel.letter}"
        self.status[key] = self.ps.ps4000SetChannel(self.handle,
                                                    channel.channel_index,
                                                    int(channel.enabled),
                                                    channel.coupling_index,
                                                    channel.range_index)
        assert_pico_ok(self.status[key])
        logger.debug('Channel %s: enabled %s, range %s', channel.letter, channel.enabled, channel.vrange)


    def set_channels(self, channels):
        '''
        Set the listed channels and switch off the other inputs of the model.
        '''
        configured = {ch.channel for ch in channels}
        for ch in channels:
            self.set_channel(ch)
        for name, index in c.PS4000_CHANNEL.items():
            if index >= self.channel_count or name in configured:
                continue
            self.set_channel(ChannelSettings(name, enabled=False))


    def set_bandwidth_filter(self, channel, enabled=True):
        self.status["setBwFilter"] = self.ps.ps4000SetBwFilter(self.handle,
                                                              c.PS4000_CHANNEL[channel],
                                                              int(enabled))
        assert_pico_ok(self.status["setBwFilter"])


    def set_simple_trigger(self, trigger, range_index):
        '''
        Set a level trigger. The threshold in mV is converted to ADC counts
        with the range of the source channel.
        '''
        trigger.validate()
        threshold = mv_to_adc(trigger.threshold_mv, range_index, self.max_adc)
        self.status["setSimpleTrigger"] = self.ps.ps4000SetSimpleTrigger(self.handle,
                                                                        int(trigger.enabled),
                                                                        trigger.source_index,
                                                                        threshold,
                                                                        trigger.direction_index,
                                                                        trigger.delay,
                                                                        trigger.auto_trigger_ms)
        assert_pico_ok(self.status["setSimpleTrigger"])
        logger.debug('Trigger on %s at %s mV (%d ADC counts)', trigger.source, trigger.threshold_mv, threshold)


    def set_trigger_off(self):
        self.status["setTriggerOff"] = self.ps.ps4000SetSimpleTrigger(self.handle, 0,
                                                                     c.PS4000_CHANNEL['PS4000_CHANNEL_A'],
                                                                     0, 0, 0, 0)
        assert_pico_ok(self.status["setTriggerOff"])


    def find_timebase(self, timebase, no_samples, oversample=1, segment_index=0):
        '''
        Query the driver for the first valid timebase index starting from
        timebase. Returns the index, the sampling interval in ns and the
        maximum number of samples available in the segment.
        '''
        interval_ns = ctypes.c_float()
        max_samples = ctypes.c_int32()
        while True:
            self.status["getTimebase2"] = self.ps.ps4000GetTimebase2(self.handle,
                                                                    timebase,
                                                                    no_samples,
                                                                    ctypes.byref(interval_ns),
                                                                    oversample,
                                                                    ctypes.byref(max_samples),
                                                                    segment_index)
            if self.status["getTimebase2"] != PICO_STATUS['PICO_INVALID_TIMEBASE']:
                break
            timebase += 1
        assert_pico_ok(self.status["getTimebase2"])
        logger.info('Timebase index: %d, sampling interval: %.1f ns', timebase, interval_ns.value)
        return timebase, interval_ns.value, max_samples.value


    def memory_segments(self, n_segments):
        max_samples = ctypes.c_int32()
        self.status["memorySegments"] = self.ps.ps4000MemorySegments(self.handle,
                                                                    n_segments,
                                                                    ctypes.byref(max_samples))
        assert_pico_ok(self.status["memorySegments"])
        return max_samples.value


    def set_no_of_captures(self, n_captures):
        self.status["setNoOfCaptures"] = self.ps.ps4000SetNoOfCaptures(self.handle, n_captures)
        assert_pico_ok(self.status["setNoOfCaptures"])


    def run_block(self, pre_trigger_samples, post_trigger_samples, timebase, oversample=1, segment_index=0):
        time_indisposed_ms = ctypes.c_int32()
        self.status["runBlock"] = self.ps.ps4000RunBlock(self.handle,
                                                        pre_trigger_samples,
                                                        post_trigger_samples,
                                                        timebase,
                                                        oversample,
                                                        ctypes.byref(time_indisposed_ms),
                                                        segment_index,
                                                        None,
                                                        None)
        assert_pico_ok(self.status["runBlock"])
        return time_indisposed_ms.value


    def is_ready(self):
        ready = ctypes.c_int16(0)
        self.status["isReady"] = self.ps.ps4000IsReady(self.handle, ctypes.byref(ready))
        assert_pico_ok(self.status["isReady"])
        return bool(ready.value)


    def wait_ready(self, poll_interval=0.01, timeout=None):
        start = time.monotonic()
        while not self.is_ready():
            if timeout is not None and time.monotonic() - start > timeout:
                raise CaptureTimeoutError(f'Device not ready after {timeout} s')
            time.sleep(poll_interval)


    def set_data_buffers(self, channel_index, buffer):
        '''
        Register a numpy int16 array with the driver for a channel.
        '''
        key = f"setDataBuffers{channel_index}"
        self.status[key] = self.ps.ps4000SetDataBuffers(self.handle,
                                                       channel_index,
                                                       buffer.ctypes.data_as(ctypes.POINTER(ctypes.c_int16)),
                                                       None,
                                                       len(buffer))
        assert_pico_ok(self.status[key])


    def set_data_buffer_bulk(self, channel_index, buffer, waveform):
        key = f"setDataBufferBulk{channel_index}_{waveform}"
        self.status[key] = self.ps.ps4000SetDataBufferBulk(self.handle,
                                                          channel_index,
                                                          buffer.ctypes.data_as(ctypes.POINTER(ctypes.c_int16)),
                                                          len(buffer),
                                                          waveform)
        assert_pico_ok(self.status[key])


    def get_values(self, no_samples, start_index=0, downsample_ratio=1,
                   ratio_mode=c.PS4000_RATIO_MODE['PS4000_RATIO_MODE_NONE'], segment_index=0):
        num_samples = ctypes.c_uint32(no_samples)
        overflow = ctypes.c_int16()
        self.status["getValues"] = self.ps.ps4000GetValues(self.handle,
                                                          start_index,
                                                          ctypes.byref(num_samples),
                                                          downsample_ratio,
                                                          ratio_mode,
                                                          segment_index,
                                                          ctypes.byref(overflow))
        assert_pico_ok(self.status["getValues"])
        return num_samples.value, overflow.value


    def get_values_bulk(self, no_samples, from_segment, to_segment):
        num_samples = ctypes.c_uint32(no_samples)
        overflow = (ctypes.c_int16 * (to_segment - from_segment + 1))()
        self.status["getValuesBulk"] = self.ps.ps4000GetValuesBulk(self.handle,
                                                                  ctypes.byref(num_samples),
                                                                  from_segment,
                                                                  to_segment,
                                                                  ctypes.byref(overflow))
        assert_pico_ok(self.status["getValuesBulk"])
        return num_samples.value, list(overflow)


    def run_streaming(self, sample_interval, time_units, pre_trigger_samples, post_trigger_samples,
                      auto_stop, downsample_ratio, overview_buffer_size):
        '''
        Start streaming. Returns the sampling interval actually used by the
        driver, in time_units.
        '''
        interval = ctypes.c_uint32(sample_interval)
        self.status["runStreaming"] = self.ps.ps4000RunStreaming(self.handle,
                                                                ctypes.byref(interval),
                                                                time_units,
                                                                pre_trigger_samples,
                                                                post_trigger_samples,
                                                                int(auto_stop),
                                                                downsample_ratio,
                                                                overview_buffer_size)
        assert_pico_ok(self.status["runStreaming"])
        logger.info('Acquisition started!')
        return interval.value


    def streaming_ready_callback(self, function):
        return self.ps.StreamingReadyType(function)


    def get_streaming_latest_values(self, c_callback):
        # Not asserted: the streaming loop decides what to do with the code
        self.status["getStreamingLatestValues"] = self.ps.ps4000GetStreamingLatestValues(self.handle,
                                                                                        c_callback,
                                                                                        None)
        return self.status["getStreamingLatestValues"]


    def no_of_streaming_values(self):
        no_of_values = ctypes.c_uint32()
        self.status["noOfStreamingValues"] = self.ps.ps4000NoOfStreamingValues(self.handle,
                                                                              ctypes.byref(no_of_values))
        assert_pico_ok(self.status["noOfStreamingValues"])
        return no_of_values.value
