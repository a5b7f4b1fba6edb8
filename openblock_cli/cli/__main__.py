"""
Entry point for running openblock-cli as a module.

Usage: python -m openblock_cli.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
