"""
Entry point for running openblock-cli as a module.

Usage: python -m openblock_cli [command] [options]
"""

from openblock_cli.cli.parser import main

if __name__ == "__main__":
    main()
