"""
Contract Analytics: dashboard trend calculation and report export.
"""

__version__ = "0.1.0"
