import json

import numpy as np

from pypicocapture.settings import AcquisitionSettings
from pypicocapture.storage import make_saving_dir, save_metadata, save_signals


def test_saving_dir(tmp_path):
    saving_dir = make_saving_dir(tmp_path, 'run1')
    assert saving_dir == tmp_path / 'pico_aquisition' / 'run1'
    assert saving_dir.is_dir()


def test_save_signals(tmp_path):
    files = save_signals(tmp_path, {'A': np.arange(3.0), 'B': np.ones(3)}, time=np.arange(3))
    assert [f.name for f in files] == ['channelA.npy', 'channelB.npy', 'time.npy']
    np.testing.assert_allclose(np.load(tmp_path / 'channelA.npy'), [0, 1, 2])


def test_save_metadata(tmp_path, scope):
    file_name = save_metadata(tmp_path, scope, AcquisitionSettings(), {'Auto stop': True})
    metadata = json.loads(file_name.read_text())
    assert metadata['Device model'] == '4224'
    assert metadata['Max ADC value'] == 32764
    assert metadata['Auto stop'] is True
    assert metadata['Settings']['streaming']['overview_buffer_size'] == 250000
