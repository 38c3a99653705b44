# =======================================================================================
# campus_access/__init__.py - Package Initialization
# =======================================================================================
"""
Campus Access Control

Users register with a barcode identifier; a scanning station reads badges
from a camera and records entries and exits through the HTTP API.
"""

__version__ = "1.0.0"
__author__ = "Campus Access Control Team"
