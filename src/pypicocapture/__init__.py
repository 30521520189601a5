# -*- coding: utf-8 -*-

import logging

from .block import BlockData, block_spectrum, capture_block, capture_rapid_block
from .device import PicoScope4000
from .paths import configure_driver_paths, load_driver
from .settings import (AcquisitionSettings, BlockSettings, ChannelSettings,
                       RapidBlockSettings, StreamingSettings, TriggerSettings,
                       load_settings)
from .streaming import StreamingAcquisition, StreamingBlock, StreamingResult

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = '0.1.0'
