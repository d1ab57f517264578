"""
LiteWire CLI.

The `lw` command-line interface.

Usage:
    lw scan <root> --symbols symbols.yaml [--resources src/main/resources]
    lw reduce <package>...
    lw match --pattern <glob> <path>...
"""

from .. import __version__

__cli_name__ = "lw"


def main():
    """Wrapper to avoid eager import of __main__ which causes warnings with -m."""
    from .__main__ import main as _main
    return _main()
