"""Report persistence layer.

This module writes ranking, per-capita, and statistics tables as CSV
files next to the rendered region images.
"""
