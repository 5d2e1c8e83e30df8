"""Figures for the fluidized bed level control paper: particle size and step responses."""

from .errors import FigureError, InvalidInput, IOFailure, MissingAsset, MissingChannel

__version__ = "1.0.0"

__all__ = [
    "FigureError",
    "InvalidInput",
    "IOFailure",
    "MissingAsset",
    "MissingChannel",
]
