"""
Commands module for Feedarr CLI
"""

from .backlog_command import backlog_command
from .history_command import history_command
from .rss_command import rss_command
from .test_command import test_command

__all__ = ["backlog_command", "history_command", "rss_command", "test_command"]
