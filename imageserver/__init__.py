"""
Image upload, transform and placeholder service.
"""

__version__ = "1.0.0"
