"""Align vehicle sensor recordings on a common clock and write JSON scene tables."""

__version__ = "0.1.0"