# gfsync Output Module
# Rich console output

from gfsync.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
