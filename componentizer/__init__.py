"""
Componentizer - Landing page to UI component generator

Detects the visual sections of a rendered landing page and synthesizes
reusable React component variants (pixel-faithful, semantic, accessible)
for each of them.
"""

__version__ = "0.1.0"
