import logging
import sys

from cursor_stream.config.settings import LOG_LEVEL


def setup_logger(name: str = "cursor_stream", level=None):
    """
    Sets up a logger that outputs to Console (stdout).
    Child loggers (`cursor_stream.*`) propagate into it.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level if level is not None else LOG_LEVEL)

    # Avoid duplicate logs if setup is called multiple times
    if logger.hasHandlers():
        return logger

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    return logger
