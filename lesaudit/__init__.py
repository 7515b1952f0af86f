"""LES Audit - Military pay statement reconciliation."""

__version__ = "0.1.0"
