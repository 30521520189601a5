import json
import logging
from datetime import datetime
from pathlib import Path

import numpy as np

from .settings import settings_to_dict

logger = logging.getLogger(__name__)


def make_saving_dir(saving_path, subfolder_name=None):
    saving_dir = Path(saving_path) / 'pico_aquisition'
    if subfolder_name is not None:
        saving_dir = saving_dir / subfolder_name
    saving_dir.mkdir(parents=True, exist_ok=True)
    return saving_dir


def save_metadata(saving_dir, scope=None, settings=None, extra=None):
    '''
    Write the starting time, the device information and the acquisition
    settings in metadata_pico.json.
    '''
    metadata_dict = {
        'Starting time': datetime.now().strftime("%d/%m/%Y %H:%M:%S"),
    }
    if scope is not None:
        metadata_dict.update({
            'Device serial': scope.serial,
            'Device model': scope.variant,
            'Max ADC value': scope.max_adc,
        })
    if settings is not None:
        metadata_dict['Settings'] = settings_to_dict(settings)
    if extra is not None:
        metadata_dict.update(extra)
    file_name = Path(saving_dir) / 'metadata_pico.json'
    with open(file_name, 'w') as fp:
        json.dump(metadata_dict, fp, indent=2, default=str)
    return file_name


def save_signal(saving_dir, letter, signal):
    file_name = Path(saving_dir) / f'channel{letter}.npy'
    np.save(file_name, signal)
    logger.info('File saved %s', file_name)
    return file_name


def save_signals(saving_dir, signals, time=None):
    '''
    Save one channel<X>.npy file per channel (and time.npy if given).
    '''
    files = [save_signal(saving_dir, letter, signal) for letter, signal in signals.items()]
    if time is not None:
        file_name = Path(saving_dir) / 'time.npy'
        np.save(file_name, time)
        files.append(file_name)
    return files
