"""
slotguard - availability conflict checks for multi-shop salon scheduling.
"""

__version__ = "0.1.0"
