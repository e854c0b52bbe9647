"""Draw commands and the scene that collects them.

Every command is immutable and self-contained: device space geometry, the
resolved paint with alpha applied, and the clip region in effect when it was
emitted.
"""
import math
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Type, TypeVar, Union

from .clip import ClipRegion, FillRule
from .color import Paint
from .errors import DiagnosticLog
from .path import Path
from .state import SOLID, DashPattern, GraphicsState
from .utils.pdf_geometry import Box, Matrix, determinant


@dataclass(frozen=True)
class StrokeStyle:
    """Stroke parameters.

    ``width`` and ``dash`` are in user space; ``ctm`` maps them to device
    space. ``device_scale`` is the isotropic approximation of that mapping.
    """

    width: float = 1.0
    cap: int = 0
    join: int = 0
    miter_limit: float = 10.0
    dash: DashPattern = SOLID
    ctm: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

    @classmethod
    def from_state(cls, gs: GraphicsState) -> "StrokeStyle":
        return cls(
            width=gs.line_width,
            cap=gs.line_cap,
            join=gs.line_join,
            miter_limit=gs.miter_limit,
            dash=gs.dash,
            ctm=gs.ctm,
        )

    @property
    def device_scale(self) -> float:
        return math.sqrt(abs(determinant(self.ctm)))

    @property
    def device_width(self) -> float:
        return self.width * self.device_scale

    @property
    def device_dash(self) -> Tuple[Tuple[float, ...], float]:
        scale = self.device_scale
        return tuple(d * scale for d in self.dash.array), self.dash.phase * scale


@dataclass(frozen=True)
class FillPath:
    path: Path
    paint: Paint
    rule: FillRule
    clip: ClipRegion


@dataclass(frozen=True)
class StrokePath:
    path: Path
    paint: Paint
    style: StrokeStyle
    clip: ClipRegion


@dataclass(frozen=True)
class FillAndStrokePath:
    path: Path
    fill: Paint
    stroke: Paint
    rule: FillRule
    style: StrokeStyle
    clip: ClipRegion


@dataclass(frozen=True)
class ClipIntersect:
    """A clip was installed. ``clip`` is the region after the intersection."""

    path: Path
    rule: FillRule
    clip: ClipRegion


@dataclass(frozen=True)
class PaintGlyph:  # pylint: disable=too-many-instance-attributes
    """One glyph.

    ``matrix`` maps glyph space to device space, so the glyph origin is
    ``(matrix[4], matrix[5])``. ``fill`` and ``stroke`` are ``None`` when the
    text rendering mode does not paint that way.
    """

    code: int
    text: Optional[str]
    font_name: str
    fontsize: float
    matrix: Matrix
    fill: Optional[Paint]
    stroke: Optional[Paint]
    clip: ClipRegion
    style: Optional[StrokeStyle] = None

    @property
    def origin(self) -> Tuple[float, float]:
        return (self.matrix[4], self.matrix[5])


@dataclass(frozen=True)
class PaintImage:
    """An image XObject or inline image, placed by mapping the unit square."""

    name: str
    matrix: Matrix
    clip: ClipRegion
    width: int = 0
    height: int = 0
    inline: bool = False


DrawCommand = Union[
    FillPath, StrokePath, FillAndStrokePath, ClipIntersect, PaintGlyph, PaintImage
]

C = TypeVar("C")


@dataclass
class Scene:
    """The ordered draw commands of one page.

    Attributes:
        view_box: The page's MediaBox (or the box the caller supplied).
        rotate: Page rotation in degrees clockwise, for the sink to apply.
        commands: Emitted commands in painting order.
    """

    view_box: Box = (0.0, 0.0, 612.0, 792.0)
    rotate: int = 0
    commands: List[DrawCommand] = field(default_factory=list)

    def append(self, command: DrawCommand) -> None:
        self.commands.append(command)

    def of_type(self, kind: Type[C]) -> List[C]:
        return [c for c in self.commands if isinstance(c, kind)]

    def __iter__(self) -> Iterator[DrawCommand]:
        return iter(self.commands)

    def __len__(self) -> int:
        return len(self.commands)


@dataclass
class PageResult:
    """A scene with the diagnostics recorded while building it.

    ``error`` is set, and the scene empty, when the page content could not
    be read at all.
    """

    scene: Scene
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None and len(self.diagnostics) == 0
