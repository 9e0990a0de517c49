"""Hybrid résumé tailoring: rule engine, instruction compiler and readiness scorer."""

__version__ = "0.1.0"
