'''
Streaming acquisition.

The driver keeps sampling into an overview buffer while the host polls it
with GetStreamingLatestValues. Each time new samples are available the driver
calls back with their position in the overview buffer; they are copied into
an application buffer, converted to mV and appended to a ring buffer holding
the whole capture. The loop ends when the driver signals auto stop or when
the user cancels.
'''

import logging
import time
from dataclasses import dataclass, field
from threading import Event, Thread
from typing import Dict, Optional

import numpy as np
from np_rw_buffer import RingBuffer
from picosdk.constants import PICO_STATUS, PICO_STATUS_LOOKUP

from .constants import TIME_UNIT_LABELS
from .conversion import adc_to_mv, time_axis
from .exceptions import CaptureTimeoutError

logger = logging.getLogger(__name__)

PICO_OK = PICO_STATUS['PICO_OK']
PICO_BUSY = PICO_STATUS['PICO_BUSY']


@dataclass
class StreamingBlock:
    '''
    Samples delivered by one driver callback, already in mV. first_sample is
    the position of the first of them in the whole capture.
    '''
    first_sample  : int
    num_samples   : int
    signals       : Dict[str, np.ndarray]
    time          : np.ndarray
    triggered     : bool = False
    trigger_index : Optional[int] = None


@dataclass
class StreamingResult:
    signals                : Dict[str, np.ndarray]
    time                   : np.ndarray
    total_samples          : int
    first_sample           : int
    actual_sample_interval : int
    time_units             : int
    triggered              : bool = False
    trigger_index          : Optional[int] = None
    auto_stopped           : bool = False
    cancelled              : bool = False
    driver_samples         : int = 0
    status                 : int = PICO_OK
    channel_ranges_mv      : Dict[str, int] = field(default_factory=dict)

    @property
    def time_unit_label(self):
        return TIME_UNIT_LABELS[self.time_units]


class StreamingAcquisition():
    def __init__(self, scope, channels, settings, on_data=None):
        '''
        scope is a connected PicoScope4000 with channels and trigger already
        set. on_data, if given, is called with a StreamingBlock for every
        chunk of new samples.
        '''
        self.scope = scope
        self.channels = {ch.letter: ch for ch in channels if ch.enabled}
        if not self.channels:
            raise ValueError('At least one channel must be enabled')
        self.settings = settings.validate()
        self.on_data = on_data
        self.stop_event = Event()
        self.result = None
        self.error = None
        self._thread = None
        self._reset()


    def _reset(self):
        self.nextSample = 0
        self.autoStopOuter = False
        self.wasCalledBack = False
        self.triggered = False
        self.trigger_index = None
        self.cancelled = False
        self.last_status = PICO_OK
        self._events = []
        self._held = 0
        self._overflow_reported = False


    def _allocate_buffers(self):
        size = self.settings.overview_buffer_size
        self.final_buffer_length = self.settings.final_buffer_length
        self.driver_buffers = {}
        self.app_buffers = {}
        self.final_buffers = {}
        for letter, ch in self.channels.items():
            self.driver_buffers[letter] = np.zeros(shape=size, dtype=np.int16) # ADC is 16 bit
            self.app_buffers[letter] = np.zeros(shape=size, dtype=np.int16)
            self.final_buffers[letter] = RingBuffer((self.final_buffer_length, 1), dtype=np.float64)
            self.scope.set_data_buffers(ch.channel_index, self.driver_buffers[letter])


    def streaming_callback(self,
                           handle,
                           noOfSamples,
                           startIndex,
                           overflow,
                           triggerAt,
                           triggered,
                           autoStop,
                           param):
        '''
        Called by the driver from GetStreamingLatestValues. Only copies the new
        samples out of the driver buffers, the processing happens in the loop.
        '''
        self.wasCalledBack = True
        sourceEnd = startIndex + noOfSamples
        for letter, buffer in self.driver_buffers.items():
            self.app_buffers[letter][startIndex:sourceEnd] = buffer[startIndex:sourceEnd]
        self._events.append((noOfSamples, startIndex, overflow, triggerAt, triggered))
        if autoStop:
            self.autoStopOuter = True


    def on_new_data(self, block):
        '''
        Hook for computations on new data, called after every chunk has been
        stored. Subclasses can extend it; by default it forwards the block to
        on_data.
        '''
        if self.on_data is not None:
            self.on_data(block)


    def _store(self, signals, num_samples):
        capacity = self.final_buffer_length
        if self._held + num_samples > capacity and not self._overflow_reported:
            logger.warning('Final buffer full (%d samples), oldest samples are discarded', capacity)
            self._overflow_reported = True
        for letter, values in signals.items():
            # circular write, the oldest samples are overwritten
            self.final_buffers[letter].write(values.reshape((-1, 1)), error=False)
        self._held = min(self._held + num_samples, capacity)


    def _process(self, noOfSamples, startIndex, overflow, triggerAt, triggered):
        if noOfSamples <= 0:
            return
        if triggered and not self.triggered:
            self.triggered = True
            self.trigger_index = self.nextSample + triggerAt
            logger.info('Triggered - index in buffer: %d', triggerAt)
        if overflow:
            logger.warning('Voltage range exceeded (overflow flags %#x)', overflow)
        previousTotal = self.nextSample
        self.nextSample += noOfSamples
        logger.debug('Collected %d samples, startIndex: %d total: %d.', noOfSamples, startIndex, self.nextSample)

        sourceEnd = startIndex + noOfSamples
        max_adc = self.scope.max_adc
        signals = {letter: adc_to_mv(self.app_buffers[letter][startIndex:sourceEnd], ch.range_mv, max_adc)
                   for letter, ch in self.channels.items()}
        self._store(signals, noOfSamples)
        block = StreamingBlock(first_sample=previousTotal,
                               num_samples=noOfSamples,
                               signals=signals,
                               time=time_axis(noOfSamples, self.actual_sample_interval,
                                              self.settings.downsample_ratio, previousTotal),
                               triggered=bool(triggered),
                               trigger_index=self.trigger_index)
        self.on_new_data(block)


    def _wait_for_data(self):
        '''
        Poll the driver until it calls back, the user cancels or the driver
        returns an error.
        '''
        self.wasCalledBack = False
        while True:
            status = self.scope.get_streaming_latest_values(self.cFuncPtr)
            if status == PICO_BUSY:
                status = PICO_OK
            if status != PICO_OK or self.wasCalledBack or self.stop_event.is_set():
                return status
            # If we weren't called back by the driver, this means no data is ready.
            time.sleep(self.settings.poll_interval)


    def get_data_loop(self):
        while not self.autoStopOuter and self.last_status == PICO_OK:
            self.last_status = self._wait_for_data()
            events, self._events = self._events, []
            for event in events:
                self._process(*event)
            if self.last_status != PICO_OK:
                logger.error('GetStreamingLatestValues returned %s, stopping acquisition',
                             PICO_STATUS_LOOKUP.get(self.last_status, self.last_status))
                break
            if self.autoStopOuter:
                logger.info('AutoStop: TRUE - exiting loop.')
                break
            if self.stop_event.is_set():
                self.cancelled = True
                logger.info('Acquisition cancelled - aborting data collection.')
                break
        if self.triggered:
            logger.info('Triggered at overall index: %d', self.trigger_index)


    def run(self):
        '''
        Run the whole acquisition in the calling thread and return a
        StreamingResult.
        '''
        self.stop_event.clear()
        return self._capture()


    def _capture(self):
        self._reset()
        self._allocate_buffers()
        s = self.settings
        self.actual_sample_interval = self.scope.run_streaming(s.sample_interval,
                                                               s.time_units_index,
                                                               s.pre_trigger_samples,
                                                               s.post_trigger_samples,
                                                               s.auto_stop,
                                                               s.downsample_ratio,
                                                               s.overview_buffer_size)
        self.cFuncPtr = self.scope.streaming_ready_callback(self.streaming_callback)
        try:
            self.get_data_loop()
            # Samples held in the driver, with a trigger the collected ones are more
            driver_samples = self.scope.no_of_streaming_values()
            logger.info('Number of samples available from the driver: %d', driver_samples)
        finally:
            self.scope.stop()
        logger.info('Acquisition completed!')
        self.result = self._build_result(driver_samples)
        return self.result


    def _build_result(self, driver_samples):
        first_sample = self.nextSample - self._held
        signals = {letter: buffer.read(self._held).reshape(-1) if self._held else np.zeros(0)
                   for letter, buffer in self.final_buffers.items()}
        self._held = 0
        return StreamingResult(signals=signals,
                               time=time_axis(len(next(iter(signals.values()))),
                                              self.actual_sample_interval,
                                              self.settings.downsample_ratio,
                                              first_sample),
                               total_samples=self.nextSample,
                               first_sample=first_sample,
                               actual_sample_interval=self.actual_sample_interval,
                               time_units=self.settings.time_units_index,
                               triggered=self.triggered,
                               trigger_index=self.trigger_index,
                               auto_stopped=self.autoStopOuter,
                               cancelled=self.cancelled,
                               driver_samples=driver_samples,
                               status=self.last_status,
                               channel_ranges_mv={letter: ch.range_mv for letter, ch in self.channels.items()})


    def _run_in_thread(self):
        try:
            self._capture()
        except Exception as e:
            self.error = e
            logger.error('Streaming acquisition failed: %s', e)


    def start(self):
        '''
        Run the acquisition in a dedicated thread. Use join() to wait for the
        result and cancel() to stop it early.
        '''
        self.stop_event.clear()
        self.result = None
        self.error = None
        self._thread = Thread(target=self._run_in_thread, daemon=True)
        self._thread.start()
        return self._thread


    def cancel(self):
        self.stop_event.set()


    def join(self, timeout=None):
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                raise CaptureTimeoutError(f'Streaming acquisition still running after {timeout} s')
        if self.error is not None:
            raise self.error
        return self.result
