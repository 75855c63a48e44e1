"""Radial plot geometry and rendering.

This package maps cleaned weekly series onto polar drawing instructions.
It hands finished layouts to the matplotlib image renderer.
"""
