"""Core utilities: exceptions."""
