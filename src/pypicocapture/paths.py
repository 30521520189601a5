'''
Path configuration for the PicoScope 4000 series driver.

The vendor shared libraries (ps4000 and its dependencies) must be findable
before picosdk.ps4000 is imported, because the binding loads the library at
import time.

Microsoft Windows: install the Pico Technology SDK, the libraries are placed
in C:\\Program Files\\Pico Technology\\SDK\\lib.
Linux: install the libps4000 package, the libraries are placed in
/opt/picoscope/lib.
macOS: install the PicoScope 6 application, the libraries are in the
application bundle.

Set PICOSDK_LIB_PATH to use a different folder.
'''

import importlib.util
import logging
import os
import platform
import warnings
from dataclasses import dataclass
from pathlib import Path

from .exceptions import (DirectoryNotFoundWarning,
                         LibraryPathNotFoundWarning,
                         OperatingSystemNotSupportedError,
                         SupportLibraryNotFoundWarning)

logger = logging.getLogger(__name__)

PATH_OVERRIDE_VAR = 'PICOSDK_LIB_PATH'

MAC_DRIVER_PATH = '/Applications/PicoScope6.app/Contents/Resources/lib'
LINUX_DRIVER_PATH = '/opt/picoscope/lib/'
WIN_SDK_INSTALL_PATH = 'C:\\Program Files\\Pico Technology\\SDK'
WIN_DRIVER_PATH = WIN_SDK_INSTALL_PATH + '\\lib'
# 32 bit interpreter on 64 bit Windows
WOW64_SDK_INSTALL_PATH = 'C:\\Program Files (x86)\\Pico Technology\\SDK'
WOW64_DRIVER_PATH = WOW64_SDK_INSTALL_PATH + '\\lib'
WOW64_PROGRAM_FILES = 'C:\\Program Files (x86)\\'

LIBRARY_PATH_VARS = {
    'Darwin': 'DYLD_LIBRARY_PATH',
    'Linux': 'LD_LIBRARY_PATH',
    'Windows': 'PATH',
}

# file name stems, Linux adds the soname version
LIBRARY_FILES = {
    'Darwin': 'libps4000.dylib',
    'Linux': 'libps4000.so',
    'Windows': 'ps4000.dll',
}


@dataclass
class DriverPathInfo:
    working_dir           : str
    package_dir           : str
    system                : str
    arch                  : str
    driver_path           : str
    env_var               : str
    support_library_found : bool = True


def architecture(system, bits=None):
    '''
    Architecture string in the usual xxx32/xxx64 form, e.g. 'win64'.
    '''
    if bits is None:
        bits = platform.architecture()[0]
    suffix = '64' if bits.startswith('64') else '32'
    prefix = {'Windows': 'win', 'Linux': 'glnxa', 'Darwin': 'maci'}[system]
    if prefix == 'glnxa' and suffix == '32':
        return 'glnx86'
    return prefix + suffix


def default_driver_path(system, arch):
    if system == 'Darwin':
        return MAC_DRIVER_PATH
    if system == 'Linux':
        return LINUX_DRIVER_PATH
    if arch == 'win32' and os.path.isdir(WOW64_PROGRAM_FILES):
        return WOW64_DRIVER_PATH
    return WIN_DRIVER_PATH


def _add_to_path_var(environ, var_name, path):
    current = environ.get(var_name, '')
    entries = [entry for entry in current.split(os.pathsep) if entry]
    if path not in entries:
        entries.append(path)
        environ[var_name] = os.pathsep.join(entries)


def driver_library_found(driver_path, system):
    return any(Path(driver_path).glob(LIBRARY_FILES[system] + '*'))


def support_library_available():
    return importlib.util.find_spec('picosdk') is not None


def configure_driver_paths(system=None, arch=None, environ=None):
    '''
    Add the folder of the driver libraries to the library search variable of
    the operating system and check that the picosdk package is available.

    Returns a DriverPathInfo describing what was configured.
    '''
    if environ is None:
        environ = os.environ
    if system is None:
        system = platform.system()
    if system not in LIBRARY_PATH_VARS:
        raise OperatingSystemNotSupportedError(
            f'Operating system {system!r} not supported - please contact support@picotech.com')
    if arch is None:
        arch = architecture(system)

    driver_path = environ.get(PATH_OVERRIDE_VAR) or default_driver_path(system, arch)
    if not os.path.isdir(driver_path):
        warnings.warn(f'Folder {driver_path} not found. Please ensure that the location '
                      'of the library files is on the library search path.',
                      DirectoryNotFoundWarning, stacklevel=2)
    elif not driver_library_found(driver_path, system):
        warnings.warn(f'{LIBRARY_FILES[system]} not found in {driver_path}',
                      LibraryPathNotFoundWarning, stacklevel=2)

    var_name = LIBRARY_PATH_VARS[system]
    _add_to_path_var(environ, var_name, driver_path)
    if system == 'Windows' and environ is os.environ and hasattr(os, 'add_dll_directory') \
            and os.path.isdir(driver_path):
        os.add_dll_directory(driver_path)

    support_library_found = support_library_available()
    if not support_library_found:
        warnings.warn('picosdk package not installed - please install the PicoSDK '
                      'Python wrappers.', SupportLibraryNotFoundWarning, stacklevel=2)

    info = DriverPathInfo(working_dir=os.getcwd(),
                          package_dir=str(Path(__file__).resolve().parent),
                          system=system,
                          arch=arch,
                          driver_path=driver_path,
                          env_var=var_name,
                          support_library_found=support_library_found)
    logger.debug('Driver path %s added to %s', driver_path, var_name)
    return info


_driver = None


def load_driver():
    '''
    Configure the paths once and return the picosdk ps4000 binding.
    '''
    global _driver
    if _driver is None:
        configure_driver_paths()
        from picosdk.ps4000 import ps4000
        _driver = ps4000
    return _driver
