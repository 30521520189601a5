import logging

MESSAGE_FORMAT = '> Pico msg: %(message)s'


def configure_logging(level=logging.INFO, stream=None):
    '''
    Attach a stream handler printing the package messages on the console.
    Calling it again only changes the level.
    '''
    logger = logging.getLogger('pypicocapture')
    logger.setLevel(level)
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and getattr(handler, '_pico_handler', False):
            handler.setLevel(level)
            return logger
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(MESSAGE_FORMAT))
    handler.setLevel(level)
    handler._pico_handler = True
    logger.addHandler(handler)
    return logger
