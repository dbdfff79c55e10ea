# armory_scout/__main__.py
"""Allows ``python -m armory_scout``."""
from armory_scout.cli import cli

cli()
