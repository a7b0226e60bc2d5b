"""Packing strategies: free-rectangle and irregular first-fit."""

from .base import NestingPacker, PositionSearch
from .rectangle_packer import RectanglePacker, FreeRect
from .complex_packer import ComplexPacker

__all__ = [
    'NestingPacker',
    'PositionSearch',
    'RectanglePacker',
    'FreeRect',
    'ComplexPacker',
]
