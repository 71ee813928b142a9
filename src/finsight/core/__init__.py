"""Core utilities: exceptions and market-time helpers."""
