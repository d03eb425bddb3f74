"""Sitestage - assemble compiled documentation pages into a static site."""

__version__ = "0.1.0"
