"""
roomschedule - Room reservation schedule with consistent free and reserved slots.
"""

__version__ = "0.1.0"
