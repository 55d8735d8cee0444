"""
Availability engine - weekly availability overlap, matching and slot queries.
"""

__version__ = "0.1.0"
