# armory_scout/__init__.py
"""
ArmoryScout package initializer.
Defines package version; the command line lives in :mod:`armory_scout.cli`.
"""
__version__ = "0.1.0"
