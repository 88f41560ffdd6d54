"""Adapters from the board core to storage."""
