"""
web_capture package initializer.
Defines package version; the CLI entry point lives in :mod:`web_capture.cli`.
"""
__version__ = "0.1.0"
