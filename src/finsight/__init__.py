"""Finsight: stock prediction engine and trade reconciliation core."""

__version__ = "0.1.0"
