"""Gamenight - watchability scoring and tonight's pick."""

__version__ = "0.1.0"
