import ctypes

import numpy as np
from picosdk.functions import mV2adc

TIME_CONVERSION_FACTORS = [1e-15, 1e-12, 1e-9, 1e-6, 1e-3, 1]


def time_unit_in_seconds(sampling_time, time_unit):
    return sampling_time * TIME_CONVERSION_FACTORS[time_unit]


def adc_to_mv(adc, range_mv, max_adc):
    '''
    Convert ADC counts into millivolts for a channel whose full scale is
    range_mv.
    '''
    return np.asarray(adc, dtype=np.float64) * (range_mv / max_adc)


def mv_to_adc(millivolts, range_index, max_adc):
    return int(mV2adc(millivolts, range_index, ctypes.c_int16(max_adc)))


def time_axis(num_samples, interval, downsample_ratio=1, start=0):
    '''
    Time of each sample, in the unit of interval. Downsampling reduces the
    number of samples so the interval is multiplied by the ratio.
    '''
    return float(interval) * downsample_ratio * np.arange(start, start + num_samples, dtype=np.float64)


def next_pow2(n):
    if n <= 1:
        return 0
    return int(np.ceil(np.log2(n)))


def single_sided_spectrum(signal, time_interval_ns):
    '''
    Single-sided amplitude spectrum of a signal sampled every
    time_interval_ns nanoseconds. The signal is zero padded to the next power
    of 2.

    Returns the frequencies (Hz) and the amplitudes, n/2 points each.
    '''
    signal = np.asarray(signal, dtype=np.float64)
    n = 2 ** next_pow2(len(signal))
    y = np.fft.fft(signal, n)
    p2 = np.abs(y / n)
    p1 = p2[:n // 2 + 1]
    p1[1:-1] = 2 * p1[1:-1]
    fs = 1 / (time_interval_ns * 1e-9)
    frequencies = np.arange(n // 2) * (fs / n)
    return frequencies, p1[:n // 2]
