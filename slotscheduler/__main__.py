"""
Entry point for ``python -m slotscheduler``.
"""

from .cli.app import app

if __name__ == "__main__":
    app()
