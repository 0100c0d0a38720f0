"""
Civic Portal - async client and terminal front end for the citizen
engagement platform.
"""

__version__ = "1.0.0"
