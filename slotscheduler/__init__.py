"""
slotscheduler - find the earliest meeting slot all participants share.
"""

__version__ = "0.1.0"
