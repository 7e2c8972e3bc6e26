"""
Logging configuration for the storefront service.
"""

import logging
import sys

from storefront.config import settings

# Create logger
logger = logging.getLogger('storefront')
logger.setLevel(settings.log_level.upper())

if not logger.handlers:
    # Console handler with formatting
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.DEBUG)

    formatter = logging.Formatter(
        '%(asctime)s | %(levelname)-5s | %(name)s | %(message)s',
        datefmt='%H:%M:%S'
    )
    console.setFormatter(formatter)

    logger.addHandler(console)


def get_logger(name):
    """Get a child logger for a specific module."""
    if name.startswith('storefront.'):
        name = name[len('storefront.'):]
    return logger.getChild(name)
