class PicoCaptureError(Exception):
    pass


class OperatingSystemNotSupportedError(PicoCaptureError):
    pass


class InvalidSettingsError(PicoCaptureError, ValueError):
    pass


class CaptureTimeoutError(PicoCaptureError):
    pass


class LibraryPathNotFoundWarning(UserWarning):
    pass


class DirectoryNotFoundWarning(UserWarning):
    pass


class SupportLibraryNotFoundWarning(UserWarning):
    pass
