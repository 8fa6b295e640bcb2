"""
Track rendering package.

Turns recorded GPS fixes into bounded, projected, gap-split polylines with an
arc-length replay mapping, and writes SVG, GPX, GeoJSON and JSON exports. The
public entrypoint for CLI usage is ``tracepath.cli.main``.
"""

from .cli import main  # noqa: F401
