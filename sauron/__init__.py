"""Sauron — firearm build configurator engine."""

__version__ = "0.1.0"
