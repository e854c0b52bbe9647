"""The graphics state and its save/restore stack.

:class:`GraphicsState` is immutable. Operators produce a new state with
:meth:`GraphicsState.evolve` and the stack stores references, so ``q`` costs
one list append however large the state is, and a restored state is exactly
the object that was saved.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from .clip import ClipRegion
from .color import BLACK, DEVICE_GRAY, ColorSpace, Paint
from .errors import StateUnderflow
from .text import TextState
from .utils.pdf_geometry import IDENTITY, Matrix, multiply

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashPattern:
    """Line dash pattern (``d``): on/off lengths in user space and a phase."""

    array: Tuple[float, ...] = ()
    phase: float = 0.0

    @property
    def is_solid(self) -> bool:
        return not self.array or not any(self.array)


SOLID = DashPattern()


@dataclass(frozen=True)
class GraphicsState:  # pylint: disable=too-many-instance-attributes
    """Every parameter saved by ``q`` and restored by ``Q``.

    Fill and stroke keep both the selected color space with its raw
    components and the resolved paint, so that ``sc`` can be interpreted in
    the current space and paints can be emitted without resolving again.
    """

    ctm: Matrix = IDENTITY
    clip: ClipRegion = ClipRegion.UNBOUNDED

    fill_space: ColorSpace = DEVICE_GRAY
    fill_components: Tuple[float, ...] = (0.0,)
    fill_color: Paint = BLACK
    stroke_space: ColorSpace = DEVICE_GRAY
    stroke_components: Tuple[float, ...] = (0.0,)
    stroke_color: Paint = BLACK
    fill_alpha: float = 1.0
    stroke_alpha: float = 1.0

    line_width: float = 1.0
    line_cap: int = 0
    line_join: int = 0
    miter_limit: float = 10.0
    dash: DashPattern = SOLID

    rendering_intent: str = "/RelativeColorimetric"
    flatness: float = 1.0
    stroke_adjustment: bool = False
    blend_mode: str = "/Normal"
    soft_mask: Optional[str] = None
    overprint_stroke: bool = False
    overprint_fill: bool = False
    overprint_mode: int = 0

    text: TextState = field(default_factory=TextState)

    def evolve(self, **changes) -> "GraphicsState":
        return replace(self, **changes)

    def with_text(self, **changes) -> "GraphicsState":
        return replace(self, text=replace(self.text, **changes))

    @property
    def fill_paint(self) -> Paint:
        """The fill color with the fill alpha applied."""
        return self.fill_color.with_opacity(self.fill_alpha)

    @property
    def stroke_paint(self) -> Paint:
        """The stroke color with the stroke alpha applied."""
        return self.stroke_color.with_opacity(self.stroke_alpha)


class GraphicsStateStack:
    """The current graphics state plus the states saved by ``q``.

    Args:
        initial: State at page entry. Defaults to :class:`GraphicsState`
            with all defaults.
    """

    def __init__(self, initial: Optional[GraphicsState] = None):
        self._initial = initial if initial is not None else GraphicsState()
        self.current = self._initial
        self._saved: List[GraphicsState] = []

    @property
    def depth(self) -> int:
        """Number of saved states."""
        return len(self._saved)

    @property
    def initial(self) -> GraphicsState:
        return self._initial

    def save(self) -> None:
        self._saved.append(self.current)

    def restore(self, floor: int = 0) -> None:
        """Pop the most recent saved state into the current state.

        Args:
            floor: Saves at or below this depth belong to an enclosing
                content stream and cannot be restored from here.

        Raises:
            StateUnderflow: No saved state above ``floor``.
        """
        if len(self._saved) <= floor:
            raise StateUnderflow("Restore without a matching save")
        self.current = self._saved.pop()

    def update(self, **changes) -> GraphicsState:
        self.current = self.current.evolve(**changes)
        return self.current

    def update_text(self, **changes) -> GraphicsState:
        self.current = self.current.with_text(**changes)
        return self.current

    def apply_matrix(self, m: Matrix) -> None:
        """``cm``: the new transform applies before the existing CTM."""
        self.update(ctm=multiply(m, self.current.ctm))

    def unwind(self, depth: int) -> None:
        """Restore repeatedly until exactly ``depth`` states are saved."""
        if depth < 0 or depth > len(self._saved):
            return
        while len(self._saved) > depth:
            self.current = self._saved.pop()
