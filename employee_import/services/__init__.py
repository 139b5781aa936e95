"""Import pipeline services."""
