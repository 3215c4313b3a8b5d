"""
clinicdash - Doctor availability and clinic dashboard analytics.
"""

__version__ = "0.1.0"
