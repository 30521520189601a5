'''
Figures for the captured data. Voltages are in mV.
'''

import matplotlib.pyplot as plt
import numpy as np

from .block import block_spectrum
from .constants import TIME_UNIT_LABELS


def _time_label(unit):
    return 'Time (μs)' if unit == 'us' else f'Time ({unit})'


def plot_block(block_data, title='Block Data Acquisition', ax=None):
    if ax is None:
        fig, ax = plt.subplots(num='PicoScope 4000 Series Example - Block Mode Capture')
    for letter, signal in block_data.signals.items():
        ax.plot(block_data.time_ms, signal, label=f'Channel {letter}')
    ax.set_title(title)
    ax.set_xlabel('Time (ms)')
    ax.set_ylabel('Voltage (mV)')
    ax.grid(True)
    ax.legend()
    return ax


def plot_block_fft(block_data, channel='A'):
    fig, (time_ax, fft_ax) = plt.subplots(2, 1, num='PicoScope 4000 Series Example - Block Mode Capture with FFT')
    plot_block(block_data, ax=time_ax)
    range_mv = block_data.channel_ranges_mv.get(channel)
    if range_mv is not None:
        time_ax.set_ylim(-range_mv, range_mv)

    frequencies, amplitudes = block_spectrum(block_data, channel)
    fft_ax.plot(frequencies, amplitudes)
    fft_ax.set_title('Single-Sided Amplitude Spectrum of y(t)')
    fft_ax.set_xlabel('Frequency (Hz)')
    fft_ax.set_ylabel('|Y(f)|')
    fft_ax.grid(True)
    return fig


def plot_rapid_block_3d(block_data, channel='A'):
    '''
    One trace per capture, captures along the y axis.
    '''
    fig = plt.figure('PicoScope 4000 Series Example - Rapid Block Mode Capture')
    ax = fig.add_subplot(projection='3d')
    ax.view_init(elev=24, azim=-105)
    signals = block_data.signals[channel]
    for i in range(signals.shape[1]):
        ax.plot(block_data.time_ns, np.full(block_data.num_samples, i + 1), signals[:, i])
    ax.set_title(f'Rapid Block Data Acquisition - Channel {channel}')
    ax.set_xlabel('Time (ns)')
    ax.set_ylabel('Capture')
    ax.set_zlabel('Voltage (mV)')
    return fig


def plot_streaming(result, ax=None):
    if ax is None:
        fig, ax = plt.subplots(num='PicoScope 4000 Series Example - Streaming Mode Capture')
    for letter, signal in result.signals.items():
        ax.plot(result.time, signal, label=f'Channel {letter}')
    ax.set_title('Streaming Data Acquisition (Final)')
    ax.set_xlabel(_time_label(result.time_unit_label))
    ax.set_ylabel('Voltage (mV)')
    if result.channel_ranges_mv:
        y_range = max(result.channel_ranges_mv.values())
        ax.set_ylim(-y_range, y_range)
    ax.grid(True)
    ax.legend()
    return ax


class LiveStreamingPlot():
    '''
    on_data consumer drawing every new chunk of a streaming acquisition.
    Only use it when the acquisition runs in the main thread.
    '''
    def __init__(self, settings, channels):
        self.fig, self.ax = plt.subplots(num='PicoScope 4000 Series Example - Live Streaming')
        # Fixed limits avoid rescaling at every chunk
        self.ax.set_xlim(0, settings.sample_interval * settings.max_samples)
        y_range = max(ch.range_mv for ch in channels if ch.enabled)
        self.ax.set_ylim(-y_range, y_range)
        self.ax.grid(True)
        self.ax.set_title('Live Streaming Data Capture')
        self.ax.set_xlabel(_time_label(TIME_UNIT_LABELS[settings.time_units_index]))
        self.ax.set_ylabel('Voltage (mV)')
        plt.ion()

    def __call__(self, block):
        for signal in block.signals.values():
            self.ax.plot(block.time, signal)
        self.fig.canvas.draw_idle()
        plt.pause(0.001)
