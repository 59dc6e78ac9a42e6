"""Salle2Sport gym-class booking core."""

__version__ = "1.0.0"
