"""Logging, configuration persistence and concurrency helpers."""
