"""
Liquid ASCII
============

A 2-D particle fluid rendered as a density-shaded grid of ASCII glyphs.

Particles heat up near the bottom of the window and cool near the top,
so the fluid churns like a lava lamp:

  - Hot particles rise against gravity, cold ones sink (crossover at 0.4)
  - Viscosity damps velocity exponentially every tick
  - A uniform-grid spatial hash drives soft short-range separation
  - The pointer pushes and stirs nearby particles
  - A metaball density field Σ(1 - d²/R²)² picks a glyph and opacity
    per character cell, drawn in a normal pass then a bold pass
"""

__version__ = "1.0.0"
