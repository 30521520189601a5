'''
Stream channels A and B for 2 s at 1 MS/s with auto stop, then plot and save
the whole capture. Pass a JSON settings file as first argument to change the
parameters, and --live to plot the data while it is collected.
Press Ctrl+C to stop the capture early.
'''

import sys

import matplotlib.pyplot as plt

from pypicocapture import AcquisitionSettings, ChannelSettings, PicoScope4000, StreamingAcquisition, load_settings
from pypicocapture.log import configure_logging
from pypicocapture.plotting import LiveStreamingPlot, plot_streaming
from pypicocapture.storage import make_saving_dir, save_metadata, save_signals

configure_logging()

args = [arg for arg in sys.argv[1:] if arg != '--live']
live = '--live' in sys.argv[1:]
if args:
    settings = load_settings(args[0])
else:
    settings = AcquisitionSettings(channels=[ChannelSettings('PS4000_CHANNEL_A', vrange='PS4000_2V'),
                                             ChannelSettings('PS4000_CHANNEL_B', vrange='PS4000_2V')])
    settings.validate()

pico = PicoScope4000(serial=settings.serial)
try:
    print(pico.unit_info())
    pico.set_channels(settings.channels)
    pico.set_trigger_off()
    on_data = LiveStreamingPlot(settings.streaming, settings.channels) if live else None
    acquisition = StreamingAcquisition(pico, settings.channels, settings.streaming, on_data=on_data)
    if live:
        # plotting needs the main thread
        result = acquisition.run()
    else:
        acquisition.start()
        try:
            result = acquisition.join()
        except KeyboardInterrupt:
            acquisition.cancel()
            result = acquisition.join()
finally:
    pico.disconnect()

if settings.saving_path is not None:
    saving_dir = make_saving_dir(settings.saving_path)
    save_metadata(saving_dir, pico, settings, {'Samples collected': result.total_samples,
                                               'Trigger index': result.trigger_index})
    save_signals(saving_dir, result.signals, result.time)

plot_streaming(result)
plt.show()
