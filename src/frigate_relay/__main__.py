"""
Entry point for running the relay as a module.

Usage:
    python -m frigate_relay [-c config.yaml]
"""

from .cli import main

if __name__ == "__main__":
    main()
