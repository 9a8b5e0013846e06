"""User interfaces built on the editing core."""
