"""
Blog Admin Client
=================

Session-scoped synchronization layer for moderating a blog backend's users,
articles and comments through its admin HTTP API.
"""

__version__ = "1.0.0"
