import logging

__version__ = "2026.10.001"

logging.getLogger(__name__).addHandler(logging.NullHandler())
