"""Offline-first local storage for loyalty cards"""

__version__ = "0.0.1"
