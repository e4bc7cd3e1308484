"""Allow running gfsync as ``python -m gfsync``."""

from gfsync.cli import cli

if __name__ == "__main__":
    cli(prog_name="gfs")
