"""Command line interface for sopsreader."""

from sopsreader.cli.app import app

__all__ = ["app"]
