"""
Convenience entry point for running slotguard as a module.

Usage: python -m slotguard [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
