"""Zone generation around a depot."""
