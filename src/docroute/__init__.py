"""Docroute - compile documentation sidebars into routes and navigation."""
