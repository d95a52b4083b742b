"""
Command-line interface for the SimplifyQA execution client.

Entry point::

    simplifyqa --help
"""

from simplifyqa.cli.app import app

__all__ = ["app"]
