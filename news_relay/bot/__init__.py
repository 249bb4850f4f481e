"""Inbound bot commands."""

from .commands import CommandRouter, parse_command
from .poller import UpdatePoller

__all__ = ["CommandRouter", "UpdatePoller", "parse_command"]
