"""
Packer interface
================
"""

from abc import ABC, abstractmethod
from typing import Generator, List, Optional, Tuple

from ..models import PackItem, Placement

# Generator yielding heartbeat values and returning the placement
PositionSearch = Generator[float, None, Optional[Placement]]


class NestingPacker(ABC):
    """
    Common interface of the packing strategies.

    Coordinates are relative to the packing area (sheet minus margins).
    Subclasses implement either find_position() or iter_find_position().
    """

    def __init__(self, sheet_w: float, sheet_h: float):
        self.sheet_w = sheet_w
        self.sheet_h = sheet_h
        self._placed: List[Tuple[PackItem, Placement]] = []

    def iter_find_position(self, item: PackItem) -> PositionSearch:
        """
        Cooperative form of find_position().

        Yields heartbeats while searching; the generator's return value is
        the placement (or None).
        """
        return self.find_position(item)
        yield  # pragma: no cover

    def find_position(self, item: PackItem) -> Optional[Placement]:
        """Placement for the item, or None when it does not fit"""
        search = self.iter_find_position(item)
        while True:
            try:
                next(search)
            except StopIteration as stop:
                return stop.value

    @abstractmethod
    def place_item(self, item: PackItem, placement: Placement) -> None:
        pass

    @property
    def placed_items(self) -> List[Tuple[PackItem, Placement]]:
        return list(self._placed)
