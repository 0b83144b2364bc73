"""Version information for Hosby Python SDK"""

__version__ = "1.4.2"
