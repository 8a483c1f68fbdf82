"""
Tron - dotfiles and config manager.

Keeps the repository copy and the deployed system copy of each managed
config file in step: status, deploy, backup and diff.

Author: Tron Project
License: MIT
"""

__version__ = "0.1.0"
