'''
Capture 10 waveforms in rapid block mode on channel A and plot them in 3D.
'''

import matplotlib.pyplot as plt

from pypicocapture import (ChannelSettings, PicoScope4000, RapidBlockSettings, TriggerSettings,
                           capture_rapid_block)
from pypicocapture.log import configure_logging
from pypicocapture.plotting import plot_rapid_block_3d

configure_logging()

channels = [ChannelSettings('PS4000_CHANNEL_A', vrange='PS4000_5V')]
trigger = TriggerSettings('PS4000_CHANNEL_A', threshold_mv=500, direction='PS4000_RISING', auto_trigger_ms=1000)
rapid_block = RapidBlockSettings(pre_trigger_samples=2500, post_trigger_samples=7500,
                                 timebase=4, n_segments=16, n_captures=10)

pico = PicoScope4000()
try:
    pico.set_channels(channels)
    pico.set_simple_trigger(trigger, channels[0].range_index)
    data = capture_rapid_block(pico, channels, rapid_block)
    pico.stop()
finally:
    pico.disconnect()

plot_rapid_block_3d(data, 'A')
plt.show()
