"""
Entry point for running the envbee CLI as a module.

Usage:
    python -m envbee_sdk [command] [options]
"""

from envbee_sdk.cli import main

if __name__ == "__main__":
    main()
