"""
Logging utilities for the MCP server and the OAuth callback receiver.

Records go to stderr because stdout carries the MCP stdio protocol.
"""

import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )


def token_preview(token: str | None, length: int = 20) -> str:
    """Shorten a secret for log output."""
    if not token:
        return "<none>"
    return f"{token[:length]}..."


__all__ = ["configure_logging", "token_preview"]
