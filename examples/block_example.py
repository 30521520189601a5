'''
Capture a block of data on channel A and plot it.
Suggested input signal: channel A, 4 Vpp 50 Hz sine wave.
'''

import matplotlib.pyplot as plt

from pypicocapture import BlockSettings, ChannelSettings, PicoScope4000, TriggerSettings, capture_block
from pypicocapture.log import configure_logging
from pypicocapture.plotting import plot_block

configure_logging()

# Measurement parameters
channels = [ChannelSettings('PS4000_CHANNEL_A', vrange='PS4000_5V')]
trigger = TriggerSettings('PS4000_CHANNEL_A', threshold_mv=500, direction='PS4000_RISING', auto_trigger_ms=1000)
block = BlockSettings(pre_trigger_samples=0, post_trigger_samples=10000, timebase=2)

# Connect instrument and perform the acquisition
pico = PicoScope4000()
try:
    pico.set_channels(channels)
    pico.set_simple_trigger(trigger, channels[0].range_index)
    data = capture_block(pico, channels, block)
    pico.stop()
finally:
    pico.disconnect()

plot_block(data)
plt.show()
