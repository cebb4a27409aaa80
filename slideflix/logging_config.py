"""
Process-wide logging setup for SlideFlix.
"""

import logging
from typing import Optional


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Setup structured logging configuration"""
    log_level = logging.DEBUG if verbose else logging.INFO

    detailed_formatter = logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)-20s | %(funcName)-15s:%(lineno)-4d | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    simple_formatter = logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(simple_formatter)
    handlers = [console_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True
    )
    logging.getLogger('ffmpeg').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
