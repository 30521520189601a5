import os
import warnings

import pytest

from pypicocapture import paths
from pypicocapture.exceptions import (DirectoryNotFoundWarning, LibraryPathNotFoundWarning,
                                      OperatingSystemNotSupportedError, SupportLibraryNotFoundWarning)


def test_linux_path_added_to_ld_library_path(tmp_path):
    environ = {'PICOSDK_LIB_PATH': str(tmp_path), 'LD_LIBRARY_PATH': '/usr/local/lib'}
    info = paths.configure_driver_paths(system='Linux', arch='glnxa64', environ=environ)
    assert info.env_var == 'LD_LIBRARY_PATH'
    assert info.driver_path == str(tmp_path)
    assert environ['LD_LIBRARY_PATH'] == os.pathsep.join(['/usr/local/lib', str(tmp_path)])


def test_path_not_added_twice(tmp_path):
    environ = {'PICOSDK_LIB_PATH': str(tmp_path), 'DYLD_LIBRARY_PATH': str(tmp_path)}
    paths.configure_driver_paths(system='Darwin', arch='maci64', environ=environ)
    assert environ['DYLD_LIBRARY_PATH'] == str(tmp_path)


def test_missing_driver_folder_warns(tmp_path):
    missing = str(tmp_path / 'missing')
    environ = {'PICOSDK_LIB_PATH': missing}
    with pytest.warns(DirectoryNotFoundWarning):
        info = paths.configure_driver_paths(system='Windows', arch='win64', environ=environ)
    assert missing in environ['PATH']
    assert info.env_var == 'PATH'


def test_default_driver_paths(monkeypatch):
    monkeypatch.setattr(paths.os.path, 'isdir', lambda path: False)
    assert paths.default_driver_path('Linux', 'glnxa64') == paths.LINUX_DRIVER_PATH
    assert paths.default_driver_path('Darwin', 'maci64') == paths.MAC_DRIVER_PATH
    assert paths.default_driver_path('Windows', 'win32') == paths.WIN_DRIVER_PATH


def test_wow64_driver_path(monkeypatch):
    monkeypatch.setattr(paths.os.path, 'isdir', lambda path: path == paths.WOW64_PROGRAM_FILES)
    assert paths.default_driver_path('Windows', 'win32') == paths.WOW64_DRIVER_PATH
    assert paths.default_driver_path('Windows', 'win64') == paths.WIN_DRIVER_PATH


def test_unsupported_operating_system():
    with pytest.raises(OperatingSystemNotSupportedError):
        paths.configure_driver_paths(system='SunOS', environ={})


def test_missing_picosdk_warns(tmp_path, monkeypatch):
    monkeypatch.setattr(paths, 'support_library_available', lambda: False)
    with pytest.warns(SupportLibraryNotFoundWarning):
        info = paths.configure_driver_paths(system='Linux', arch='glnxa64',
                                            environ={'PICOSDK_LIB_PATH': str(tmp_path)})
    assert not info.support_library_found


def test_architecture_names():
    assert paths.architecture('Windows', '64bit') == 'win64'
    assert paths.architecture('Linux', '32bit') == 'glnx86'
    assert paths.architecture('Darwin', '64bit') == 'maci64'


def test_folder_without_driver_library_warns(tmp_path):
    with pytest.warns(LibraryPathNotFoundWarning):
        paths.configure_driver_paths(system='Linux', arch='glnxa64',
                                     environ={'PICOSDK_LIB_PATH': str(tmp_path)})


def test_versioned_driver_library_found(tmp_path):
    (tmp_path / 'libps4000.so.2').touch()
    with warnings.catch_warnings(record=True) as record:
        warnings.simplefilter('always')
        paths.configure_driver_paths(system='Linux', arch='glnxa64',
                                     environ={'PICOSDK_LIB_PATH': str(tmp_path)})
    assert not [w for w in record if issubclass(w.category, LibraryPathNotFoundWarning)]
