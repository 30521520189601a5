'''
Configuration records for channels, trigger and the acquisition modes.
The defaults are the ones used by the example programs.
'''

import json
from dataclasses import asdict, dataclass, field
from typing import List, Optional

from . import constants as c
from .conversion import time_unit_in_seconds
from .exceptions import InvalidSettingsError


def _lookup(table, name, what):
    try:
        return table[name]
    except KeyError:
        raise InvalidSettingsError(f'Unknown {what} {name!r}, allowed values: {", ".join(table)}') from None


@dataclass
class ChannelSettings:
    channel  : str
    enabled  : bool = True
    coupling : str = 'PS4000_DC'
    vrange   : str = 'PS4000_5V'

    @property
    def channel_index(self):
        return _lookup(c.PS4000_CHANNEL, self.channel, 'channel')

    @property
    def coupling_index(self):
        return _lookup(c.PS4000_COUPLING, self.coupling, 'coupling')

    @property
    def range_index(self):
        return _lookup(c.PS4000_RANGE, self.vrange, 'voltage range')

    @property
    def range_mv(self):
        return c.SCOPE_INPUT_RANGES[self.range_index]

    @property
    def letter(self):
        return c.channel_letter(self.channel)

    def validate(self):
        if self.channel == 'PS4000_EXTERNAL':
            raise InvalidSettingsError('The external input cannot be set as a channel')
        self.channel_index
        self.coupling_index
        self.range_index
        return self


@dataclass
class TriggerSettings:
    source          : str = 'PS4000_CHANNEL_A'
    threshold_mv    : float = 500
    direction       : str = 'PS4000_RISING'
    delay           : int = 0
    auto_trigger_ms : int = 1000
    enabled         : bool = True

    @property
    def source_index(self):
        return _lookup(c.PS4000_CHANNEL, self.source, 'trigger source')

    @property
    def direction_index(self):
        return _lookup(c.PS4000_THRESHOLD_DIRECTION, self.direction, 'threshold direction')

    def validate(self):
        self.source_index
        self.direction_index
        if self.auto_trigger_ms < 0 or self.delay < 0:
            raise InvalidSettingsError('Trigger delay and auto trigger time must be positive')
        return self


@dataclass
class BlockSettings:
    pre_trigger_samples  : int = 0
    post_trigger_samples : int = 10000
    timebase             : int = 2 # first index tried, increased until the driver accepts it
    oversample           : int = 1
    segment_index        : int = 0
    downsample_ratio     : int = 1
    ratio_mode           : str = 'PS4000_RATIO_MODE_NONE'

    @property
    def total_samples(self):
        return self.pre_trigger_samples + self.post_trigger_samples

    @property
    def ratio_mode_index(self):
        return _lookup(c.PS4000_RATIO_MODE, self.ratio_mode, 'ratio mode')

    def validate(self):
        if self.total_samples <= 0:
            raise InvalidSettingsError('At least one sample must be captured')
        if self.downsample_ratio < 1:
            raise InvalidSettingsError('The downsampling ratio must be at least 1')
        self.ratio_mode_index
        return self


@dataclass
class RapidBlockSettings(BlockSettings):
    pre_trigger_samples  : int = 2500
    post_trigger_samples : int = 7500
    timebase             : int = 4
    n_segments           : int = 16
    n_captures           : int = 10

    def validate(self):
        super().validate()
        if self.n_captures < 1 or self.n_captures > self.n_segments:
            raise InvalidSettingsError(
                f'Number of captures ({self.n_captures}) must be between 1 and the '
                f'number of memory segments ({self.n_segments})')
        return self


@dataclass
class StreamingSettings:
    sample_interval      : int = 1
    time_units           : str = 'PS4000_US'
    pre_trigger_samples  : int = 0
    post_trigger_samples : int = 2000000
    auto_stop            : bool = True
    downsample_ratio     : int = 1
    overview_buffer_size : int = 250000
    # Use 1.5 when streaming with a trigger or without auto stop to leave
    # room for the additional pre-trigger data
    final_buffer_factor  : float = 1.0
    poll_interval        : float = 0.001

    @property
    def time_units_index(self):
        return _lookup(c.PS4000_TIME_UNITS, self.time_units, 'time unit')

    @property
    def max_samples(self):
        return self.pre_trigger_samples + self.post_trigger_samples

    @property
    def final_buffer_length(self):
        return int(round(self.final_buffer_factor * self.max_samples / self.downsample_ratio))

    @property
    def sample_interval_seconds(self):
        return time_unit_in_seconds(self.sample_interval, self.time_units_index)

    def validate(self):
        self.time_units_index
        if self.sample_interval <= 0:
            raise InvalidSettingsError('The sample interval must be positive')
        if self.max_samples <= 0 or self.overview_buffer_size <= 0:
            raise InvalidSettingsError('Buffer sizes must be positive')
        if self.downsample_ratio < 1:
            raise InvalidSettingsError('The downsampling ratio must be at least 1')
        if self.final_buffer_factor < 1.0:
            raise InvalidSettingsError('The final buffer cannot be smaller than the requested samples')
        if self.final_buffer_length < 1:
            raise InvalidSettingsError(
                f'{self.max_samples} samples with a downsampling ratio of {self.downsample_ratio} '
                'leave no room in the final buffer')
        return self


@dataclass
class AcquisitionSettings:
    channels    : List[ChannelSettings] = field(default_factory=lambda: [ChannelSettings('PS4000_CHANNEL_A')])
    trigger     : TriggerSettings = field(default_factory=TriggerSettings)
    block       : BlockSettings = field(default_factory=BlockSettings)
    rapid_block : RapidBlockSettings = field(default_factory=RapidBlockSettings)
    streaming   : StreamingSettings = field(default_factory=StreamingSettings)
    serial      : Optional[str] = None
    saving_path : Optional[str] = None

    def enabled_channels(self):
        return [ch for ch in self.channels if ch.enabled]

    def channel(self, name):
        for ch in self.channels:
            if ch.channel == name:
                return ch
        raise InvalidSettingsError(f'Channel {name} is not configured')

    def validate(self):
        names = [ch.validate().channel for ch in self.channels]
        if len(set(names)) != len(names):
            raise InvalidSettingsError('A channel is configured more than once')
        self.trigger.validate()
        self.block.validate()
        self.rapid_block.validate()
        self.streaming.validate()
        return self


def settings_from_dict(data):
    data = dict(data)
    try:
        channels = [ChannelSettings(**ch) for ch in data.pop('channels', [])] or None
        kwargs = {
            'trigger': TriggerSettings(**data.pop('trigger', {})),
            'block': BlockSettings(**data.pop('block', {})),
            'rapid_block': RapidBlockSettings(**data.pop('rapid_block', {})),
            'streaming': StreamingSettings(**data.pop('streaming', {})),
        }
        if channels is not None:
            kwargs['channels'] = channels
        settings = AcquisitionSettings(**kwargs, **data)
    except TypeError as e:
        raise InvalidSettingsError(f'Invalid settings: {e}') from e
    return settings.validate()


def load_settings(path):
    '''
    Read the acquisition settings from a JSON file. Missing sections take the
    default values.
    '''
    with open(path, 'r') as fp:
        return settings_from_dict(json.load(fp))


def settings_to_dict(settings):
    return asdict(settings)
