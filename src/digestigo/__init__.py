"""Digestive health tracking from chat messages."""

__version__ = "0.1.0"
