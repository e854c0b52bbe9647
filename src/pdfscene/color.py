"""Color spaces and their resolution to RGBA paints.

Only device color is modelled exactly. CIE-based spaces are treated as their
device equivalents, ICCBased spaces as their alternate, and
Separation/DeviceN through Type 2 tint functions where possible. Pattern
colors resolve to a flat approximation, since patterns and shadings are not
rendered.

Alpha is not part of the stored color: the interpreter multiplies the
graphics state's fill or stroke alpha in when a command is emitted.
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Tuple

import pikepdf

from .errors import (
    CONVERSION_ERRORS,
    DiagnosticKind,
    DiagnosticLog,
    FormatViolation,
    InvalidColorIndex,
    RecoverableError,
    UnsupportedOperator,
)

logger = logging.getLogger(__name__)

MAX_COLOR_SPACE_NESTING = 8


def _clamp01(x: float) -> float:
    return max(0.0, min(1.0, float(x)))


@dataclass(frozen=True)
class Paint:
    """A resolved color with components in ``[0, 1]``."""

    red: float
    green: float
    blue: float
    alpha: float = 1.0

    def with_opacity(self, opacity: float) -> "Paint":
        """Return this paint with its alpha multiplied by ``opacity``."""
        return replace(self, alpha=self.alpha * _clamp01(opacity))

    @property
    def rgba8(self) -> Tuple[int, int, int, int]:
        return tuple(  # type: ignore[return-value]
            int(round(_clamp01(c) * 255))
            for c in (self.red, self.green, self.blue, self.alpha)
        )

    @property
    def hex(self) -> str:
        r, g, b, _ = self.rgba8
        return f"#{r:02x}{g:02x}{b:02x}"

    @classmethod
    def gray(cls, level: float) -> "Paint":
        g = _clamp01(level)
        return cls(g, g, g)


BLACK = Paint(0.0, 0.0, 0.0)


def cmyk_to_rgb(c: float, m: float, y: float, k: float) -> Paint:
    return Paint(
        1.0 - min(1.0, c + k),
        1.0 - min(1.0, m + k),
        1.0 - min(1.0, y + k),
    )


class ColorSpaceKind(Enum):
    DEVICE_GRAY = "DeviceGray"
    DEVICE_RGB = "DeviceRGB"
    DEVICE_CMYK = "DeviceCMYK"
    LAB = "Lab"
    INDEXED = "Indexed"
    SEPARATION = "Separation"
    DEVICE_N = "DeviceN"
    PATTERN = "Pattern"


@dataclass(frozen=True)
class TintTransform:
    """A Type 2 (exponential interpolation) function of one input."""

    c0: Tuple[float, ...]
    c1: Tuple[float, ...]
    exponent: float = 1.0

    def evaluate(self, x: float) -> Tuple[float, ...]:
        t = _clamp01(x) ** self.exponent
        return tuple(a + t * (b - a) for a, b in zip(self.c0, self.c1))

    @property
    def average(self) -> Tuple[float, ...]:
        return tuple((a + b) / 2 for a, b in zip(self.c0, self.c1))


@dataclass(frozen=True)
class ColorSpace:
    """A parsed color space.

    Attributes:
        kind: The family.
        components: Number of color operands the space takes.
        base: Underlying space for Indexed, Pattern (uncolored) and the
            alternate space of Separation/DeviceN.
        palette: Indexed lookup table, one tuple of base components per entry.
        tint: Tint transform for Separation/DeviceN, when it could be parsed.
        name: The name the space was selected by.
    """

    kind: ColorSpaceKind
    components: int
    base: Optional["ColorSpace"] = None
    palette: Tuple[Tuple[float, ...], ...] = ()
    tint: Optional[TintTransform] = None
    name: str = ""

    def initial_components(self) -> Tuple[float, ...]:
        if self.kind is ColorSpaceKind.DEVICE_CMYK:
            return (0.0, 0.0, 0.0, 1.0)
        if self.kind in (ColorSpaceKind.SEPARATION, ColorSpaceKind.DEVICE_N):
            return (1.0,) * self.components
        if self.kind is ColorSpaceKind.PATTERN:
            return ()
        return (0.0,) * self.components

    def palette_entry(self, index: int) -> Tuple[float, ...]:
        """Look up an Indexed palette entry.

        Raises:
            InvalidColorIndex: If ``index`` is outside the palette.
        """
        if not 0 <= index < len(self.palette):
            raise InvalidColorIndex(
                f"Color index {index} outside palette of {len(self.palette)} entries"
            )
        return self.palette[index]


DEVICE_GRAY = ColorSpace(ColorSpaceKind.DEVICE_GRAY, 1, name="/DeviceGray")
DEVICE_RGB = ColorSpace(ColorSpaceKind.DEVICE_RGB, 3, name="/DeviceRGB")
DEVICE_CMYK = ColorSpace(ColorSpaceKind.DEVICE_CMYK, 4, name="/DeviceCMYK")
PATTERN = ColorSpace(ColorSpaceKind.PATTERN, 0, name="/Pattern")

DEVICE_SPACES = {
    "/DeviceGray": DEVICE_GRAY,
    "/DeviceRGB": DEVICE_RGB,
    "/DeviceCMYK": DEVICE_CMYK,
    "/Pattern": PATTERN,
    # Inline image abbreviations
    "/G": DEVICE_GRAY,
    "/RGB": DEVICE_RGB,
    "/CMYK": DEVICE_CMYK,
}

_CIE_EQUIVALENTS = {
    "/CalGray": DEVICE_GRAY,
    "/CalRGB": DEVICE_RGB,
    "/CalCMYK": DEVICE_CMYK,
}


def _is_name(obj: Any) -> bool:
    return isinstance(obj, (str, pikepdf.Name))


def _is_array(obj: Any) -> bool:
    return isinstance(obj, (list, tuple, pikepdf.Array))


def _as_bytes(obj: Any) -> bytes:
    if isinstance(obj, bytes):
        return obj
    if isinstance(obj, pikepdf.String):
        return bytes(obj)
    if isinstance(obj, pikepdf.Stream):
        return obj.read_bytes()
    if isinstance(obj, str):
        return obj.encode("latin1")
    raise FormatViolation(f"Expected a string or stream lookup table, got {obj!r}")


def _numbers(values: Any, default: Sequence[float]) -> Tuple[float, ...]:
    if values is None:
        return tuple(float(v) for v in default)
    return tuple(float(v) for v in values)


def parse_function(obj: Any) -> Optional[TintTransform]:
    """Parse a tint function, if it is one we can evaluate.

    Handles Type 2 functions, arrays of single-output Type 2 functions and
    Type 3 stitching functions (approximated by their outer endpoints).
    """
    if obj is None:
        return None
    if _is_array(obj):
        parts = [parse_function(f) for f in obj]
        if not parts or any(p is None or len(p.c0) != 1 for p in parts):
            return None
        return TintTransform(
            tuple(p.c0[0] for p in parts),
            tuple(p.c1[0] for p in parts),
            parts[0].exponent,
        )
    try:
        function_type = int(obj.get("/FunctionType", -1))
    except (AttributeError, TypeError, ValueError):
        return None
    if function_type == 2:
        return TintTransform(
            _numbers(obj.get("/C0"), [0.0]),
            _numbers(obj.get("/C1"), [1.0]),
            float(obj.get("/N", 1.0)),
        )
    if function_type == 3:
        subs = [parse_function(f) for f in obj.get("/Functions", [])]
        if not subs or any(s is None for s in subs):
            return None
        return TintTransform(subs[0].c0, subs[-1].c1)
    return None


def parse_color_space(
    obj: Any,
    lookup: Optional[Callable[[str], ColorSpace]] = None,
    depth: int = 0,
) -> ColorSpace:
    """Parse a color space object (a name or an array).

    Args:
        obj: The color space, as found in a resource dictionary or operand.
        lookup: Resolves names that are not device spaces.
        depth: Current nesting, bounded by ``MAX_COLOR_SPACE_NESTING``.

    Raises:
        FormatViolation: The object is malformed.
        UnsupportedOperator: The color space family is not supported.
        ResourceMissing: A named space could not be found.
    """
    if depth > MAX_COLOR_SPACE_NESTING:
        raise FormatViolation("Color space nesting too deep")

    if _is_name(obj):
        name = str(obj)
        if name in DEVICE_SPACES:
            return DEVICE_SPACES[name]
        if name in _CIE_EQUIVALENTS:
            return _CIE_EQUIVALENTS[name]
        if lookup is None:
            raise UnsupportedOperator(f"Unknown color space {name}")
        return lookup(name)

    if not _is_array(obj) or len(obj) == 0:
        raise FormatViolation(f"Malformed color space {obj!r}")

    family = str(obj[0])
    try:
        if family in _CIE_EQUIVALENTS:
            return _CIE_EQUIVALENTS[family]
        if family in DEVICE_SPACES and len(obj) == 1:
            return DEVICE_SPACES[family]
        if family == "/Lab":
            return ColorSpace(ColorSpaceKind.LAB, 3, name=family)
        if family == "/ICCBased":
            return _parse_icc(obj[1], lookup, depth)
        if family in ("/Indexed", "/I"):
            return _parse_indexed(obj, lookup, depth)
        if family == "/Pattern":
            base = parse_color_space(obj[1], lookup, depth + 1) if len(obj) > 1 else None
            return ColorSpace(ColorSpaceKind.PATTERN, 0, base=base, name=family)
        if family == "/Separation":
            return ColorSpace(
                ColorSpaceKind.SEPARATION,
                1,
                base=parse_color_space(obj[2], lookup, depth + 1),
                tint=parse_function(obj[3]),
                name=str(obj[1]),
            )
        if family == "/DeviceN":
            return ColorSpace(
                ColorSpaceKind.DEVICE_N,
                len(obj[1]),
                base=parse_color_space(obj[2], lookup, depth + 1),
                tint=parse_function(obj[3]),
                name=family,
            )
    except CONVERSION_ERRORS as e:
        raise FormatViolation(f"Malformed {family} color space: {e}") from e

    raise UnsupportedOperator(f"Unsupported color space family {family}")


def _parse_icc(stream: Any, lookup, depth: int) -> ColorSpace:
    alternate = stream.get("/Alternate")
    if alternate is not None:
        return parse_color_space(alternate, lookup, depth + 1)
    n = int(stream.get("/N", 0))
    by_components = {1: DEVICE_GRAY, 3: DEVICE_RGB, 4: DEVICE_CMYK}
    if n not in by_components:
        raise FormatViolation(f"ICCBased color space with /N {n} and no /Alternate")
    return by_components[n]


def _parse_indexed(obj: Any, lookup, depth: int) -> ColorSpace:
    base = parse_color_space(obj[1], lookup, depth + 1)
    hival = int(obj[2])
    table = _as_bytes(obj[3])
    n = max(base.components, 1)
    count = min(hival + 1, len(table) // n)
    palette = tuple(
        tuple(b / 255.0 for b in table[i * n : (i + 1) * n]) for i in range(count)
    )
    return ColorSpace(ColorSpaceKind.INDEXED, 1, base=base, palette=palette, name="/Indexed")


class ColorResolver:
    """Maps (color space, components) pairs to paints for one resource set.

    Args:
        resources: The :class:`~pdfscene.resources.ResourceSet` in effect.
        diagnostics: Where approximations and recovered errors are recorded.
        fallback_gray: Gray level for patterns with no derivable flat color.
        depth: Form XObject depth, stamped on recorded diagnostics.
    """

    def __init__(
        self,
        resources: Any,
        diagnostics: DiagnosticLog,
        fallback_gray: float = 0.5,
        depth: int = 0,
    ):
        self._resources = resources
        self._diagnostics = diagnostics
        self._depth = depth
        self.fallback_paint = Paint.gray(fallback_gray)
        self._cache = {}
        self._resolving = set()

    def lookup(self, name: str) -> ColorSpace:
        """Resolve a color space operand of ``CS``/``cs``.

        Raises:
            ResourceMissing: The name is neither a device space nor a resource.
        """
        if name in DEVICE_SPACES:
            return DEVICE_SPACES[name]
        if name not in self._cache:
            if name in self._resolving:
                raise FormatViolation(f"Color space {name} refers to itself")
            obj = self._resources.color_space(name)
            self._resolving.add(name)
            try:
                space = parse_color_space(obj, self.lookup)
            finally:
                self._resolving.discard(name)
            if not space.name or space.kind is ColorSpaceKind.INDEXED:
                space = replace(space, name=name)
            self._cache[name] = space
        return self._cache[name]

    def resolve(
        self,
        space: ColorSpace,
        components: Sequence[float],
        operator: Optional[str] = None,
    ) -> Paint:
        """Resolve components in ``space`` to a paint.

        Raises:
            FormatViolation: Wrong number of components for the space.
        """
        kind = space.kind
        if kind is ColorSpaceKind.PATTERN:
            return self.resolve_pattern(space, components, None, operator)

        comps = [float(c) for c in components]
        if len(comps) != space.components:
            raise FormatViolation(
                f"{space.name or kind.value} takes {space.components} "
                f"components, got {len(comps)}"
            )

        if kind is ColorSpaceKind.DEVICE_GRAY:
            return Paint.gray(comps[0])
        if kind is ColorSpaceKind.DEVICE_RGB:
            return Paint(*(_clamp01(c) for c in comps))
        if kind is ColorSpaceKind.DEVICE_CMYK:
            return cmyk_to_rgb(*(_clamp01(c) for c in comps))
        if kind is ColorSpaceKind.LAB:
            return Paint.gray(comps[0] / 100.0)
        if kind is ColorSpaceKind.INDEXED:
            return self._resolve_indexed(space, comps[0], operator)
        return self._resolve_tinted(space, comps, operator)

    def _resolve_indexed(
        self, space: ColorSpace, value: float, operator: Optional[str]
    ) -> Paint:
        index = int(round(value))
        try:
            entry = space.palette_entry(index)
        except InvalidColorIndex as err:
            self._diagnostics.record_error(err, operator, self._depth)
            if not space.palette:
                return BLACK
            entry = space.palette[min(max(index, 0), len(space.palette) - 1)]
        return self.resolve(space.base or DEVICE_GRAY, entry, operator)

    def _resolve_tinted(
        self, space: ColorSpace, comps: Sequence[float], operator: Optional[str]
    ) -> Paint:
        tint, base = space.tint, space.base
        if tint is not None and base is not None and len(comps) == 1:
            out = tint.evaluate(comps[0])
            if len(out) == base.components:
                return self.resolve(base, out, operator)
        self._diagnostics.record(
            DiagnosticKind.UNSUPPORTED_OPERATOR,
            f"Tint transform of {space.name or space.kind.value} approximated as gray",
            operator,
            self._depth,
        )
        return Paint.gray(1.0 - max(_clamp01(c) for c in comps))

    def resolve_pattern(
        self,
        space: ColorSpace,
        components: Sequence[float],
        pattern_name: Optional[str],
        operator: Optional[str] = None,
    ) -> Paint:
        """Flat-color approximation of a pattern color."""
        if space.base is not None and components:
            self._note_pattern(operator)
            return self.resolve(space.base, components, operator)
        if pattern_name is None:
            return BLACK
        self._note_pattern(operator)
        try:
            pattern = self._resources.pattern(pattern_name)
        except RecoverableError as err:
            self._diagnostics.record_error(err, operator, self._depth)
            return self.fallback_paint
        try:
            pattern_type = int(pattern.get("/PatternType", 1))
        except (TypeError, ValueError):
            pattern_type = 1
        if pattern_type == 2 and "/Shading" in pattern:
            return self.shading_paint(pattern["/Shading"], operator)
        return self.fallback_paint

    def shading_paint(self, shading: Any, operator: Optional[str] = None) -> Paint:
        """Average color of a shading's function endpoints."""
        try:
            space = parse_color_space(
                shading.get("/ColorSpace", pikepdf.Name.DeviceGray), self.lookup
            )
            function = parse_function(shading.get("/Function"))
            if function is None or len(function.average) != space.components:
                return self.fallback_paint
            return self.resolve(space, function.average, operator)
        except RecoverableError as err:
            self._diagnostics.record_error(err, operator, self._depth)
            return self.fallback_paint
        except CONVERSION_ERRORS as e:
            self._diagnostics.record(
                DiagnosticKind.FORMAT_VIOLATION,
                f"Malformed shading: {e}",
                operator,
                self._depth,
            )
            return self.fallback_paint

    def _note_pattern(self, operator: Optional[str]) -> None:
        self._diagnostics.record(
            DiagnosticKind.UNSUPPORTED_OPERATOR,
            "Pattern color approximated by a flat color",
            operator,
            self._depth,
        )
