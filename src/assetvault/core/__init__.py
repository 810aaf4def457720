"""Core sync engine."""
