"""
daily-videos - calendar of the videos and Live Photos captured each day.
"""

__version__ = "0.1.0"
