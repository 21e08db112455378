"""Filesystem adapter for Citrix ShareFile."""

__version__ = "0.1.0"
