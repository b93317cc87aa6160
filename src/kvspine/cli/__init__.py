"""kvspine command-line interface."""

from kvspine.cli.app import app

__all__ = ["app"]
