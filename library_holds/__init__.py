"""
Library Holds API - holds, reservas e expiração automática.
"""

__version__ = "0.1.0"
