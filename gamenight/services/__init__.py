"""Gamenight services."""
