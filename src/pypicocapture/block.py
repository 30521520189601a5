'''
Block and rapid block captures.

A block capture collects a fixed number of samples around a single trigger
event in the scope memory and retrieves them once the device is ready. In
rapid block mode the memory is divided into segments and one block is
captured in each segment back-to-back.
'''

import logging
from dataclasses import dataclass, field
from typing import Dict

import numpy as np

from .conversion import adc_to_mv, single_sided_spectrum, time_axis

logger = logging.getLogger(__name__)


@dataclass
class BlockData:
    time_ns            : np.ndarray
    signals            : Dict[str, np.ndarray] # channel letter -> mV, samples x captures in rapid block
    num_samples        : int
    timebase           : int
    time_interval_ns   : float
    overflow           : object = 0
    time_indisposed_ms : int = 0
    captures           : int = 1
    max_samples        : int = 0
    channel_ranges_mv  : Dict[str, int] = field(default_factory=dict)

    @property
    def time_ms(self):
        return self.time_ns / 1e6

    def channel_overflowed(self, channel_index):
        '''
        The driver sets one bit per channel in the overflow flags.
        '''
        if isinstance(self.overflow, list):
            return [bool(flag & (1 << channel_index)) for flag in self.overflow]
        return bool(self.overflow & (1 << channel_index))


def _enabled(channels):
    enabled = [ch for ch in channels if ch.enabled]
    if not enabled:
        raise ValueError('At least one channel must be enabled')
    return enabled


def capture_block(scope, channels, settings, poll_interval=0.01, timeout=None):
    '''
    Capture a single block on the enabled channels. The channels and the
    trigger must already be set on the device.
    '''
    settings.validate()
    channels = _enabled(channels)
    timebase, interval_ns, max_samples = scope.find_timebase(settings.timebase,
                                                             settings.total_samples,
                                                             settings.oversample,
                                                             settings.segment_index)
    time_indisposed_ms = scope.run_block(settings.pre_trigger_samples,
                                         settings.post_trigger_samples,
                                         timebase,
                                         settings.oversample,
                                         settings.segment_index)
    scope.wait_ready(poll_interval, timeout)

    buffer_length = settings.total_samples
    buffers = {}
    for ch in channels:
        buffers[ch.letter] = np.zeros(shape=buffer_length, dtype=np.int16) # ADC is 16 bit
        scope.set_data_buffers(ch.channel_index, buffers[ch.letter])

    num_samples, overflow = scope.get_values(buffer_length,
                                             0, # start index
                                             settings.downsample_ratio,
                                             settings.ratio_mode_index,
                                             settings.segment_index)
    max_adc = scope.max_adc
    signals = {ch.letter: adc_to_mv(buffers[ch.letter][:num_samples], ch.range_mv, max_adc)
               for ch in channels}
    logger.info('Block captured: %d samples', num_samples)
    return BlockData(time_ns=time_axis(num_samples, interval_ns, settings.downsample_ratio),
                     signals=signals,
                     num_samples=num_samples,
                     timebase=timebase,
                     time_interval_ns=interval_ns,
                     overflow=overflow,
                     time_indisposed_ms=time_indisposed_ms,
                     max_samples=max_samples,
                     channel_ranges_mv={ch.letter: ch.range_mv for ch in channels})


def capture_rapid_block(scope, channels, settings, poll_interval=0.01, timeout=None):
    '''
    Capture settings.n_captures blocks in consecutive memory segments and
    retrieve them all at once. Each signal is a samples x captures array.
    '''
    settings.validate()
    channels = _enabled(channels)
    max_segment_samples = scope.memory_segments(settings.n_segments)
    if settings.total_samples > max_segment_samples:
        logger.warning('%d samples requested but segments hold only %d',
                       settings.total_samples, max_segment_samples)
    timebase, interval_ns, max_samples = scope.find_timebase(settings.timebase,
                                                             settings.total_samples,
                                                             settings.oversample,
                                                             settings.segment_index)
    scope.set_no_of_captures(settings.n_captures)
    time_indisposed_ms = scope.run_block(settings.pre_trigger_samples,
                                         settings.post_trigger_samples,
                                         timebase,
                                         settings.oversample,
                                         settings.segment_index)
    scope.wait_ready(poll_interval, timeout)

    buffer_length = settings.total_samples
    buffers = {}
    for ch in channels:
        buffers[ch.letter] = np.zeros(shape=(settings.n_captures, buffer_length), dtype=np.int16)
        for waveform in range(settings.n_captures):
            scope.set_data_buffer_bulk(ch.channel_index, buffers[ch.letter][waveform], waveform)

    num_samples, overflow = scope.get_values_bulk(buffer_length, 0, settings.n_captures - 1)
    max_adc = scope.max_adc
    signals = {ch.letter: adc_to_mv(buffers[ch.letter][:, :num_samples].T, ch.range_mv, max_adc)
               for ch in channels}
    logger.info('Rapid block captured: %d captures of %d samples', settings.n_captures, num_samples)
    return BlockData(time_ns=time_axis(num_samples, interval_ns),
                     signals=signals,
                     num_samples=num_samples,
                     timebase=timebase,
                     time_interval_ns=interval_ns,
                     overflow=overflow,
                     time_indisposed_ms=time_indisposed_ms,
                     captures=settings.n_captures,
                     max_samples=max_samples,
                     channel_ranges_mv={ch.letter: ch.range_mv for ch in channels})


def block_spectrum(block_data, channel):
    '''
    Single-sided amplitude spectrum of one channel of a block capture.
    '''
    # the time axis already takes the downsampling ratio into account
    if block_data.num_samples > 1:
        interval_ns = block_data.time_ns[1] - block_data.time_ns[0]
    else:
        interval_ns = block_data.time_interval_ns
    return single_sided_spectrum(block_data.signals[channel], interval_ns)
