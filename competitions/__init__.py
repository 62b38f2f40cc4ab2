"""Pool play, standings, brackets and rating storylines for club competitions."""

__version__ = "1.0.0"
