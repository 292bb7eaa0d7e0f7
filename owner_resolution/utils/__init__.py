"""Utilities: logging, field normalization, name matching."""
