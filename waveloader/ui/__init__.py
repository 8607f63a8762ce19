"""Rendering building blocks for the wave loader."""
