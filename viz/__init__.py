"""
Visualization Package.

This package provides interactive inspection tools for the architect/building
graph, including a Streamlit interface for stepping the force layout,
focusing and dragging nodes and reading the side panel. The helpers in
`viz.utils` turn renderer glyphs into drawing primitives and stay importable
without Streamlit.
"""

# Visualization Package
