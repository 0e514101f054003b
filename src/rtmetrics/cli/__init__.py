"""
Command-line interface for the rtmetrics package.

This module provides the main CLI entry point for the collector.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
