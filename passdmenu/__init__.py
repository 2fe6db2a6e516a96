"""
dmenu front end for a pass-compatible password store.
"""

__version__ = '1.0.0'
