"""
Core Client Logic
=================

This package contains the business logic of the blog admin client: the HTTP
transport, the session, payload normalization, the per-collection resource
clients and the synchronization coordinator.
"""
