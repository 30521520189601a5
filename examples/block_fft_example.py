'''
Capture a block of 1 MS around the trigger on channel A, then plot the
signal and its single-sided amplitude spectrum.
'''

import matplotlib.pyplot as plt

from pypicocapture import BlockSettings, ChannelSettings, PicoScope4000, TriggerSettings, capture_block
from pypicocapture.log import configure_logging
from pypicocapture.plotting import plot_block_fft

configure_logging()

channels = [ChannelSettings('PS4000_CHANNEL_A', vrange='PS4000_2V')]
trigger = TriggerSettings('PS4000_CHANNEL_A', threshold_mv=500, direction='PS4000_RISING')
block = BlockSettings(pre_trigger_samples=500000, post_trigger_samples=500000, timebase=2)

pico = PicoScope4000()
try:
    pico.set_channels(channels)
    pico.set_simple_trigger(trigger, channels[0].range_index)
    data = capture_block(pico, channels, block)
    pico.stop()
finally:
    pico.disconnect()

plot_block_fft(data, 'A')
plt.show()
