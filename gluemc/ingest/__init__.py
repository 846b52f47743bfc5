"""
Log ingestion for gluemc.

Feeds server output, from a child process or a tailed log file, through the
line parser and the event dispatcher.
"""

from .ingester import LineIngester
from .process import ServerProcess
from .tailer import LogTailer

__all__ = [
    "LineIngester",
    "LogTailer",
    "ServerProcess",
]
