"""
Entry point for running evalgrid as a module.

Usage:
    python -m evalgrid run --mode test
    python -m evalgrid run -j 4 --dry-run
"""

from .cli import cli

if __name__ == "__main__":
    cli()
