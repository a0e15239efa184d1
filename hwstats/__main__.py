"""
hwstats CLI Entry Point

This module allows running hwstats as:
    python -m hwstats [command] [options]
"""

from hwstats.cli import cli

if __name__ == "__main__":
    cli()
