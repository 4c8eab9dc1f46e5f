"""Tariff reference-data import and normalization pipeline."""

__version__ = "0.1.0"
