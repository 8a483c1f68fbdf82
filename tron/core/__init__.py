"""
Tron Core Module

Path resolution and sync status classification. The command-level
Orchestrator lives in ``tron.core.orchestrator``.

Author: Tron Project
License: MIT
"""

from .paths import PathEnvironment, ResolvedConfig, expand_path, resolve_configs
from .sync_status import SyncStatus, SyncStatusEngine, classify

__all__ = [
    'PathEnvironment', 'ResolvedConfig', 'expand_path', 'resolve_configs',
    'SyncStatus', 'SyncStatusEngine', 'classify',
]
