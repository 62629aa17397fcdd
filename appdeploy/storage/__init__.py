"""
Storage and logging components.
"""

from appdeploy.storage.logger import setup_logging
from appdeploy.storage.csv_handler import CSVHandler

__all__ = [
    "setup_logging",
    "CSVHandler",
]
