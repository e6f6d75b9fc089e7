"""Glue between the core's change notifications and a Tk-style event loop."""
