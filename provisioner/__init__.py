"""Provision Google spreadsheets from a template and load CSV data into them."""

from provisioner.version import __version__

__all__ = ["__version__"]
