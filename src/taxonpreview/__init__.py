"""Hover previews for scientific names.

Resolves a short summary and image for a scientific name from Wikipedia,
Wikidata and Wikispecies, and positions a popup next to the hovered link.
"""

__version__ = "1.0.0"
