"""LES Audit CLI."""
