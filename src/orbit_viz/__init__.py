"""Orbital view of theme folders, projects and recurring tasks."""

__version__ = "0.3.0"
