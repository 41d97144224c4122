"""Shared helpers: file I/O, logging configuration and progress tracking."""
