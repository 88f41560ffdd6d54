"""Textual front-end: translates keys and pointer input into board operations."""
