"""Snapshot inputs for the visualization."""
