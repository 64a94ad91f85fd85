"""Routing and navigation core."""
