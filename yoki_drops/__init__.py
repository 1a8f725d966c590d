"""Shared helpers for the Yoki season drop scripts."""

__version__ = "0.4.0"
