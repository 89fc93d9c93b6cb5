"""revwatch command-line interface.

Exposes:
    cli -- Click command entry point (registered as ``revwatch`` script).
"""

from revwatch.cli.main import cli

__all__ = ["cli"]
