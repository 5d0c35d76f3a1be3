"""Nuzdex - Nuzlocke run, Pokedex and party tracker."""

__version__ = "0.1.0"
