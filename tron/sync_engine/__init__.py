"""
Sync Engine Module

Directed copy execution (deploy/backup) and line diff rendering.

Author: Tron Project
License: MIT
"""

from .executor import BatchResult, Decision, Direction, SyncAction, SyncExecutor, SyncOutcome
from .diff import DiffLine, DiffTag, diff_lines

__all__ = [
    'BatchResult', 'Decision', 'Direction', 'SyncAction', 'SyncExecutor', 'SyncOutcome',
    'DiffLine', 'DiffTag', 'diff_lines',
]
