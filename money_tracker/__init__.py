"""Money Tracker client and static front-end server"""

__version__ = "1.0.0"
