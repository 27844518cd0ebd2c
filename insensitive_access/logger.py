import logging

FORMAT = "%(asctime)s.%(msecs)03d - [%(levelname)s] %(name)s.%(funcName)s(%(lineno)d): %(message)s"
LOG_FORMATTER = logging.Formatter(datefmt="%Y-%m-%d %H:%M:%S", fmt=FORMAT)


def set_logging_level(level):
    """
    Set the logging level for insensitive_access.

    Args:
        level (str | int): The logging level to set, e.g. 'DEBUG' or logging.INFO.
    """
    logger.setLevel(level)


def enable_console_logging(level=logging.DEBUG):
    """
    Attach a stream handler using the package format and set the level.

    Returns:
        The handler that was added, so callers can remove it again.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(LOG_FORMATTER)
    logger.addHandler(handler)
    set_logging_level(level)
    return handler


def _create_logger(name: str):
    new_logger = logging.getLogger(name)
    new_logger.addHandler(logging.NullHandler())
    return new_logger


logger = _create_logger("insensitive_access")
set_logging_level("WARNING")
