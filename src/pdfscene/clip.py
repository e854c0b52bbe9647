"""Clip regions and the pending-clip protocol of ``W``/``W*``.

A :class:`ClipRegion` is a lazy, symbolic intersection: an ordered tuple of
``(path, fill rule)`` entries in the order the clips were encountered. The
geometric intersection is left to the consumer of the scene. Regions are
immutable, so graphics states share them by reference and a new region only
exists once a clip operator narrows the current one.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from .path import Path
from .utils.pdf_geometry import Box, intersect_boxes

logger = logging.getLogger(__name__)


class FillRule(Enum):
    NONZERO = "nonzero"
    EVEN_ODD = "evenodd"


@dataclass(frozen=True)
class ClipEntry:
    path: Path
    rule: FillRule = FillRule.NONZERO

    def contains(self, x: float, y: float) -> bool:
        return self.path.contains(x, y, even_odd=self.rule is FillRule.EVEN_ODD)


class ClipRegion:
    """Intersection of clip entries. No entries means unbounded.

    Two regions compare equal when they intersect the same set of entries,
    regardless of order or repetition, since intersection is commutative,
    associative and idempotent.
    """

    __slots__ = ("_entries",)

    UNBOUNDED: "ClipRegion"

    def __init__(self, entries: Iterable[ClipEntry] = ()):
        self._entries: Tuple[ClipEntry, ...] = tuple(entries)

    @property
    def entries(self) -> Tuple[ClipEntry, ...]:
        return self._entries

    @property
    def is_unbounded(self) -> bool:
        return not self._entries

    def intersect(self, other: "ClipRegion") -> "ClipRegion":
        if other.is_unbounded:
            return self
        if self.is_unbounded:
            return other
        return ClipRegion(self._entries + other.entries)

    def narrowed(self, path: Path, rule: FillRule = FillRule.NONZERO) -> "ClipRegion":
        return self.intersect(ClipRegion([ClipEntry(path, rule)]))

    def contains(self, x: float, y: float) -> bool:
        return all(entry.contains(x, y) for entry in self._entries)

    def bounds(self) -> Optional[Box]:
        """Conservative bounding box, ``None`` when unbounded.

        An empty intersection collapses to a zero-area box.
        """
        result: Optional[Box] = None
        for entry in self._entries:
            box = entry.path.bounds()
            if box is None:
                return (0.0, 0.0, 0.0, 0.0)
            if result is None:
                result = box
                continue
            result = intersect_boxes(result, box)
            if result is None:
                return (0.0, 0.0, 0.0, 0.0)
        return result

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other):
        if not isinstance(other, ClipRegion):
            return NotImplemented
        return frozenset(self._entries) == frozenset(other.entries)

    def __hash__(self):
        return hash(frozenset(self._entries))

    def __repr__(self):
        if self.is_unbounded:
            return "ClipRegion(UNBOUNDED)"
        return f"ClipRegion({len(self._entries)} entries)"


ClipRegion.UNBOUNDED = ClipRegion()


class ClipCompositor:
    """Holds the clip requested by ``W``/``W*`` until the next paint operator."""

    def __init__(self):
        self.pending: Optional[FillRule] = None

    @property
    def has_pending(self) -> bool:
        return self.pending is not None

    def request(self, rule: FillRule) -> None:
        self.pending = rule

    def commit(self, clip: ClipRegion, path: Path) -> Optional[ClipRegion]:
        """Intersect ``clip`` with ``path`` if a clip is pending.

        Returns the narrowed region, or ``None`` when nothing was pending.
        """
        if self.pending is None:
            return None
        rule, self.pending = self.pending, None
        return clip.narrowed(path, rule)
