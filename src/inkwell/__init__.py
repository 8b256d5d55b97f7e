"""Inkwell: a multi-role blogging platform API."""

__version__ = "0.1.0"
