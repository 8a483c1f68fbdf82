"""
Tron Utilities

Logging setup, file operations and the filesystem abstraction used by
the sync core.

Author: Tron Project
License: MIT
"""

from .filesystem import FileSystem, LocalFileSystem, MemoryFileSystem
from .logger import get_logger, setup_logging

__all__ = ['FileSystem', 'LocalFileSystem', 'MemoryFileSystem', 'get_logger', 'setup_logging']
