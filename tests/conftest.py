import ctypes

import numpy as np
import pytest
from picosdk.constants import PICO_STATUS

from pypicocapture.device import PicoScope4000

PICO_OK = PICO_STATUS['PICO_OK']


def _target(ref):
    # object passed through ctypes.byref
    return ref._obj


def _as_array(pointer, length):
    return np.ctypeslib.as_array(pointer, shape=(length,))


class FakePs4000():
    '''
    Stand-in for the picosdk ps4000 binding, recording the calls and
    serving prepared data.
    '''
    def __init__(self, variant='4224'):
        self.info = {0: '1.0.0', 1: '2.0', 2: '1', 3: variant, 4: 'AB123/0042', 5: '01Jan20', 6: '1.0'}
        self.calls = []
        self.channels = {}
        self.trigger = None
        self.min_timebase = 0
        self.interval_ns = 8.0
        self.max_samples = 1000000
        self.segment_samples = 500000
        self.captures = 1
        self.ready_after = 1
        self._ready_polls = 0
        self.buffers = {}
        self.bulk_buffers = {}
        self.block_data = {}
        self.block_overflow = 0
        self.actual_interval = None
        self.streaming_args = None
        self.chunks = []
        self.stream_statuses = []
        self.streaming_values = 0
        self.stopped = False
        self.closed = False

    StreamingReadyType = staticmethod(lambda function: function)

    def ps4000OpenUnit(self, handle):
        _target(handle).value = 16
        self.calls.append('OpenUnit')
        return PICO_OK

    def ps4000OpenUnitEx(self, handle, serial):
        _target(handle).value = 16
        self.calls.append(('OpenUnitEx', serial.value))
        return PICO_OK

    def ps4000CloseUnit(self, handle):
        self.closed = True
        return PICO_OK

    def ps4000Stop(self, handle):
        self.stopped = True
        return PICO_OK

    def ps4000EnumerateUnits(self, count, serials, serial_length):
        _target(count).value = 2
        serials.value = b'AB123/0042,CD456/0043'
        return PICO_OK

    def ps4000GetUnitInfo(self, handle, string, length, required_size, info):
        string.value = self.info[info].encode()
        _target(required_size).value = len(self.info[info]) + 1
        return PICO_OK

    def ps4000SetChannel(self, handle, channel, enabled, coupling, vrange):
        self.channels[channel] = (enabled, coupling, vrange)
        return PICO_OK

    def ps4000SetBwFilter(self, handle, channel, enabled):
        self.calls.append(('SetBwFilter', channel, enabled))
        return PICO_OK

    def ps4000SetSimpleTrigger(self, handle, enable, source, threshold, direction, delay, auto_trigger_ms):
        self.trigger = (enable, source, threshold, direction, delay, auto_trigger_ms)
        return PICO_OK

    def ps4000GetTimebase2(self, handle, timebase, no_samples, interval, oversample, max_samples, segment):
        self.calls.append(('GetTimebase2', timebase))
        if timebase < self.min_timebase:
            return PICO_STATUS['PICO_INVALID_TIMEBASE']
        _target(interval).value = self.interval_ns
        _target(max_samples).value = self.max_samples
        return PICO_OK

    def ps4000MemorySegments(self, handle, n_segments, max_samples):
        _target(max_samples).value = self.segment_samples
        self.calls.append(('MemorySegments', n_segments))
        return PICO_OK

    def ps4000SetNoOfCaptures(self, handle, n_captures):
        self.captures = n_captures
        return PICO_OK

    def ps4000RunBlock(self, handle, pre, post, timebase, oversample, time_indisposed, segment, ready, param):
        self.calls.append(('RunBlock', pre, post, timebase))
        _target(time_indisposed).value = 3
        self._ready_polls = 0
        return PICO_OK

    def ps4000IsReady(self, handle, ready):
        self._ready_polls += 1
        _target(ready).value = int(self._ready_polls >= self.ready_after)
        return PICO_OK

    def ps4000SetDataBuffers(self, handle, channel, buffer_max, buffer_min, length):
        self.buffers[channel] = (buffer_max, length)
        return PICO_OK

    def ps4000SetDataBufferBulk(self, handle, channel, buffer, length, waveform):
        self.bulk_buffers[(channel, waveform)] = (buffer, length)
        return PICO_OK

    def ps4000GetValues(self, handle, start, no_samples, ratio, mode, segment, overflow):
        n = _target(no_samples).value
        for channel, data in self.block_data.items():
            pointer, length = self.buffers[channel]
            n = min(n, len(data))
            _as_array(pointer, length)[:len(data)] = data
        _target(no_samples).value = n
        _target(overflow).value = self.block_overflow
        return PICO_OK

    def ps4000GetValuesBulk(self, handle, no_samples, from_segment, to_segment, overflow):
        n = _target(no_samples).value
        for (channel, waveform), (pointer, length) in self.bulk_buffers.items():
            data = self.block_data[channel][waveform]
            n = min(n, len(data))
            _as_array(pointer, length)[:len(data)] = data
        _target(no_samples).value = n
        return PICO_OK

    def ps4000RunStreaming(self, handle, interval, units, pre, post, auto_stop, ratio, overview_size):
        self.streaming_args = (_target(interval).value, units, pre, post, auto_stop, ratio, overview_size)
        if self.actual_interval is not None:
            _target(interval).value = self.actual_interval
        return PICO_OK

    def ps4000GetStreamingLatestValues(self, handle, callback, param):
        if self.stream_statuses:
            status = self.stream_statuses.pop(0)
            if status != PICO_OK:
                return status
        if not self.chunks:
            return PICO_OK
        chunk = self.chunks.pop(0)
        if chunk is None:
            return PICO_OK
        start = chunk.get('start', 0)
        n = 0
        for channel, data in chunk['data'].items():
            pointer, length = self.buffers[channel]
            _as_array(pointer, length)[start:start + len(data)] = data
            n = len(data)
        callback(handle, n, start, chunk.get('overflow', 0), chunk.get('trigger_at', 0),
                 int(chunk.get('triggered', False)), int(chunk.get('auto_stop', False)), None)
        return PICO_OK

    def ps4000NoOfStreamingValues(self, handle, no_of_values):
        _target(no_of_values).value = self.streaming_values
        return PICO_OK


@pytest.fixture
def driver():
    return FakePs4000()


@pytest.fixture
def scope(driver):
    return PicoScope4000(driver=driver)
