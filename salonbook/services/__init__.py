"""Service layer: every engine operation and its transaction boundary."""
