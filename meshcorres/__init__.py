"""Deform a source triangle mesh into a target mesh and find which of their
triangles correspond."""

__version__ = "0.1.0"