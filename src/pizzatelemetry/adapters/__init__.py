"""Adapters connecting the core to HTTP collectors and web frameworks."""
