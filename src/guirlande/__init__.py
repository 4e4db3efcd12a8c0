"""Guirlande: home automation server for an RGB garland and connected modules"""

__version__ = "1.0.0"
