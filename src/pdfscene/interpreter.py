"""
The content stream interpreter.

:class:`ContentInterpreter` runs a sequence of operations against a
graphics state stack and appends draw commands to a scene. Each operator is
looked up in the class-level :class:`~pdfscene.registry.OperatorTable`,
checked against its dispatch scope (page body or text object), its operands
validated and converted, and its handler called.

Nothing a content stream contains stops interpretation. Handlers raise
:class:`~pdfscene.errors.RecoverableError` subclasses, which
:meth:`ContentInterpreter.execute` records as diagnostics before moving on to
the next operator.

Form XObjects are interpreted by a child interpreter sharing the stack, scene
and diagnostics. The child's restores cannot go below the stack depth at
which it started, and the parent unwinds whatever the child left saved.
"""

import logging
from typing import Any, FrozenSet, Iterable, List, Optional, Tuple

import pikepdf

from .clip import ClipCompositor, FillRule
from .color import (
    DEVICE_CMYK,
    DEVICE_GRAY,
    DEVICE_RGB,
    ColorResolver,
    ColorSpace,
    ColorSpaceKind,
    Paint,
)
from .content import INLINE_IMAGE, Operation, read_operations
from .errors import (
    CONVERSION_ERRORS,
    ContentStreamError,
    DiagnosticKind,
    DiagnosticLog,
    FormatViolation,
    RecoverableError,
    RecursionLimitExceeded,
    UnsupportedOperator,
)
from .options import ProcessingOptions
from .path import Path, PathBuilder
from .registry import OperatorTable, Scope
from .resources import ResourceSet
from .scene import (
    ClipIntersect,
    FillAndStrokePath,
    FillPath,
    PaintGlyph,
    PaintImage,
    Scene,
    StrokePath,
    StrokeStyle,
)
from .state import DashPattern, GraphicsState, GraphicsStateStack
from .text import FILL_MODES, INVISIBLE_MODES, STROKE_MODES, TextLayout
from .utils.pdf_conversion import normalize_pdf_operand
from .utils.pdf_geometry import normalize_rect, to_matrix

logger = logging.getLogger(__name__)


def _line_style(value: Any) -> int:
    if value not in (0, 1, 2):
        raise ValueError(f"expected 0, 1 or 2, got {value!r}")
    return int(value)


# ExtGState keys that map directly onto a graphics state slot
_GSTATE_SLOTS = {
    "/LW": ("line_width", float),
    "/LC": ("line_cap", _line_style),
    "/LJ": ("line_join", _line_style),
    "/ML": ("miter_limit", float),
    "/RI": ("rendering_intent", str),
    "/FL": ("flatness", float),
    "/SA": ("stroke_adjustment", bool),
    "/CA": ("stroke_alpha", float),
    "/ca": ("fill_alpha", float),
    "/OP": ("overprint_stroke", bool),
    "/op": ("overprint_fill", bool),
    "/OPM": ("overprint_mode", int),
}


def _dash_pattern(array: List[Any], phase: float) -> DashPattern:
    values = []
    for item in array:
        if isinstance(item, bool) or not isinstance(item, (int, float)) or item < 0:
            raise FormatViolation(f"Invalid dash array entry {item!r}")
        values.append(float(item))
    return DashPattern(tuple(values), float(phase))


def _object_key(obj: Any) -> Optional[Tuple[int, int]]:
    try:
        if obj.is_indirect:
            return obj.objgen
    except AttributeError:
        pass
    return None


class ContentInterpreter:  # pylint: disable=too-many-public-methods
    """
    Interprets one content stream.

    Args:
        resources: Resources of the page or form being interpreted.
        stack: The graphics state stack. Its depth when the interpreter is
            created is the lowest depth ``Q`` can restore to.
        scene: Receives the draw commands.
        diagnostics: Receives recovered conditions.
        options: Configuration. Defaults to :class:`ProcessingOptions`.
        depth: Form XObject nesting depth, 0 for a page.
        operators: Operator table. Defaults to :attr:`OPERATORS`.
    """

    OPERATORS = OperatorTable()

    # pylint: disable=too-many-arguments, too-many-positional-arguments
    def __init__(
        self,
        resources: Optional[ResourceSet] = None,
        stack: Optional[GraphicsStateStack] = None,
        scene: Optional[Scene] = None,
        diagnostics: Optional[DiagnosticLog] = None,
        options: Optional[ProcessingOptions] = None,
        depth: int = 0,
        operators: Optional[OperatorTable] = None,
        active_forms: FrozenSet[Tuple[int, int]] = frozenset(),
    ):
        self.options = options if options is not None else ProcessingOptions()
        self.resources = (
            resources
            if resources is not None
            else ResourceSet(None, self.options.font_loader)
        )
        self.stack = stack if stack is not None else GraphicsStateStack()
        self.scene = scene if scene is not None else Scene()
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
        self.depth = depth
        self.operators = operators if operators is not None else self.OPERATORS

        self.path = PathBuilder()
        self.clipper = ClipCompositor()
        self.text = TextLayout()
        self.colors = ColorResolver(
            self.resources,
            self.diagnostics,
            self.options.pattern_fallback_gray,
            depth,
        )
        self._floor = self.stack.depth
        self._active_forms = active_forms
        self._compatibility = 0
        self._operator: Optional[str] = None

    @property
    def state(self) -> GraphicsState:
        return self.stack.current

    @property
    def in_text_object(self) -> bool:
        return self.text.active

    def run(self, operations: Iterable[Operation]) -> Scene:
        """Execute every operation in order and return the scene."""
        for operation in operations:
            self.execute(operation.operator, operation.operands)
        if self.clipper.has_pending:
            logger.debug("Content stream ended with a pending clip")
        return self.scene

    def execute(self, operator: str, operands: List[Any]) -> None:
        """Execute a single operator, recording any recovered condition."""
        self._operator = operator
        spec = self.operators.get(operator)
        if spec is None:
            if self._compatibility:
                logger.debug("Ignoring %s inside BX/EX", operator)
                return
            self.diagnostics.record(
                DiagnosticKind.UNSUPPORTED_OPERATOR,
                f"Unknown operator {operator}",
                operator,
                self.depth,
                level=logging.DEBUG,
            )
            return
        try:
            self._check_scope(operator, spec.scope)
            args = spec.validate(operands)
            spec.handler(self, *args)
        except RecoverableError as err:
            self.diagnostics.record_error(err, operator, self.depth)
        except CONVERSION_ERRORS + (pikepdf.PdfError,) as e:
            # Malformed objects reached through resources
            logger.debug("%s failed on a malformed object", operator, exc_info=True)
            self.diagnostics.record(
                DiagnosticKind.FORMAT_VIOLATION,
                f"Malformed object: {e}",
                operator,
                self.depth,
            )

    def _check_scope(self, operator: str, scope: Scope) -> None:
        if scope is Scope.TEXT and not self.text.active:
            raise FormatViolation(f"{operator} outside a text object")
        if scope is Scope.PAGE and self.text.active:
            raise FormatViolation(f"{operator} inside a text object")

    # --- Graphics state ---

    @OPERATORS.register("q")
    def _save(self):
        self.stack.save()

    @OPERATORS.register("Q")
    def _restore(self):
        self.stack.restore(self._floor)

    @OPERATORS.register("cm", signature="nnnnnn")
    def _concat_matrix(self, *values):
        self.stack.apply_matrix(to_matrix(values))

    @OPERATORS.register("w", signature="n")
    def _set_line_width(self, width):
        self.stack.update(line_width=width)

    @OPERATORS.register("J", signature="i")
    def _set_line_cap(self, cap):
        if cap not in (0, 1, 2):
            raise FormatViolation(f"Invalid line cap {cap}")
        self.stack.update(line_cap=cap)

    @OPERATORS.register("j", signature="i")
    def _set_line_join(self, join):
        if join not in (0, 1, 2):
            raise FormatViolation(f"Invalid line join {join}")
        self.stack.update(line_join=join)

    @OPERATORS.register("M", signature="n")
    def _set_miter_limit(self, limit):
        self.stack.update(miter_limit=limit)

    @OPERATORS.register("d", signature="an")
    def _set_dash(self, array, phase):
        self.stack.update(dash=_dash_pattern(array, phase))

    @OPERATORS.register("ri", signature="N")
    def _set_rendering_intent(self, intent):
        self.stack.update(rendering_intent=intent)

    @OPERATORS.register("i", signature="n")
    def _set_flatness(self, flatness):
        self.stack.update(flatness=flatness)

    @OPERATORS.register("gs", signature="N")
    def _set_ext_gstate(self, name):
        self.apply_ext_gstate(self.resources.ext_gstate(name), name)

    def apply_ext_gstate(self, egs: Any, name: str = "") -> None:
        """Apply the entries of an ExtGState dictionary.

        Entries with malformed values are skipped, each with a
        ``FormatViolation`` diagnostic; the others still apply.
        """
        changes = {}
        text_changes = {}
        keys = [str(k) for k in egs.keys()]
        for key in keys:
            value = normalize_pdf_operand(egs[key])
            try:
                if key in _GSTATE_SLOTS:
                    slot, convert = _GSTATE_SLOTS[key]
                    changes[slot] = convert(value)
                elif key == "/D":
                    changes["dash"] = _dash_pattern(value[0], value[1])
                elif key == "/BM":
                    changes["blend_mode"] = str(value[0] if isinstance(value, list) else value)
                elif key == "/SMask":
                    changes["soft_mask"] = None if value == "/None" else "/Mask"
                elif key == "/TK":
                    text_changes["knockout"] = bool(value)
                elif key == "/Font":
                    label = f"{name}/Font"
                    text_changes.update(
                        font_name=label,
                        font=self.resources.font_loader.load(label, egs[key][0]),
                        fontsize=float(value[1]),
                    )
            except (TypeError, ValueError, IndexError, KeyError, RecoverableError) as e:
                self.diagnostics.record(
                    DiagnosticKind.FORMAT_VIOLATION,
                    f"Ignoring {key} in ExtGState {name}: {e}",
                    self._operator,
                    self.depth,
                )
        if "overprint_stroke" in changes and "/op" not in keys:
            changes["overprint_fill"] = changes["overprint_stroke"]
        if changes:
            self.stack.update(**changes)
        if text_changes:
            self.stack.update_text(**text_changes)

    # --- Path construction ---

    @OPERATORS.register("m", signature="nn")
    def _move_to(self, x, y):
        self.path.move_to(x, y)

    @OPERATORS.register("l", signature="nn")
    def _line_to(self, x, y):
        self.path.line_to(x, y)

    @OPERATORS.register("c", signature="nnnnnn")
    def _curve_to(self, *values):
        self.path.curve_to(*values)

    @OPERATORS.register("v", signature="nnnn")
    def _curve_to_v(self, *values):
        self.path.curve_to_v(*values)

    @OPERATORS.register("y", signature="nnnn")
    def _curve_to_y(self, *values):
        self.path.curve_to_y(*values)

    @OPERATORS.register("h")
    def _close_path(self):
        self.path.close_path()

    @OPERATORS.register("re", signature="nnnn")
    def _rect(self, x, y, width, height):
        self.path.rect(x, y, width, height)

    # --- Path painting ---

    @OPERATORS.register("S")
    def _stroke(self):
        self._paint(stroke=True)

    @OPERATORS.register("s")
    def _close_stroke(self):
        self._paint(stroke=True, close=True)

    @OPERATORS.register("f", "F")
    def _fill(self):
        self._paint(fill=FillRule.NONZERO)

    @OPERATORS.register("f*")
    def _fill_even_odd(self):
        self._paint(fill=FillRule.EVEN_ODD)

    @OPERATORS.register("B")
    def _fill_stroke(self):
        self._paint(fill=FillRule.NONZERO, stroke=True)

    @OPERATORS.register("B*")
    def _fill_stroke_even_odd(self):
        self._paint(fill=FillRule.EVEN_ODD, stroke=True)

    @OPERATORS.register("b")
    def _close_fill_stroke(self):
        self._paint(fill=FillRule.NONZERO, stroke=True, close=True)

    @OPERATORS.register("b*")
    def _close_fill_stroke_even_odd(self):
        self._paint(fill=FillRule.EVEN_ODD, stroke=True, close=True)

    @OPERATORS.register("n")
    def _end_path(self):
        self._paint()

    def _paint(
        self, fill: Optional[FillRule] = None, stroke: bool = False, close: bool = False
    ) -> None:
        """Finish the current path, paint it and install any pending clip.

        The paint uses the clip in effect before the pending clip is applied.
        """
        if close:
            self.path.close_path()
        gs = self.state
        path = self.path.build(gs.ctm)
        if not path.is_empty:
            if fill is not None and stroke:
                self.scene.append(
                    FillAndStrokePath(
                        path,
                        gs.fill_paint,
                        gs.stroke_paint,
                        fill,
                        StrokeStyle.from_state(gs),
                        gs.clip,
                    )
                )
            elif fill is not None:
                self.scene.append(FillPath(path, gs.fill_paint, fill, gs.clip))
            elif stroke:
                self.scene.append(
                    StrokePath(path, gs.stroke_paint, StrokeStyle.from_state(gs), gs.clip)
                )
        self._commit_clip(path)

    # --- Clipping ---

    @OPERATORS.register("W")
    def _clip(self):
        self.clipper.request(FillRule.NONZERO)

    @OPERATORS.register("W*")
    def _clip_even_odd(self):
        self.clipper.request(FillRule.EVEN_ODD)

    def _commit_clip(self, path: Path) -> None:
        rule = self.clipper.pending
        new_clip = self.clipper.commit(self.state.clip, path)
        if new_clip is None:
            return
        self.stack.update(clip=new_clip)
        if self.options.emit_clip_commands:
            self.scene.append(ClipIntersect(path, rule, new_clip))

    # --- Color ---

    @OPERATORS.register("CS", signature="N")
    def _set_stroke_space(self, name):
        self._select_space(self.colors.lookup(name), stroke=True)

    @OPERATORS.register("cs", signature="N")
    def _set_fill_space(self, name):
        self._select_space(self.colors.lookup(name), stroke=False)

    @OPERATORS.register("SC", "SCN", signature="*")
    def _set_stroke_color(self, color):
        self._set_color(*color, stroke=True)

    @OPERATORS.register("sc", "scn", signature="*")
    def _set_fill_color(self, color):
        self._set_color(*color, stroke=False)

    @OPERATORS.register("G", signature="n")
    def _set_stroke_gray(self, gray):
        self._set_device_color(DEVICE_GRAY, (gray,), stroke=True)

    @OPERATORS.register("g", signature="n")
    def _set_fill_gray(self, gray):
        self._set_device_color(DEVICE_GRAY, (gray,), stroke=False)

    @OPERATORS.register("RG", signature="nnn")
    def _set_stroke_rgb(self, *rgb):
        self._set_device_color(DEVICE_RGB, rgb, stroke=True)

    @OPERATORS.register("rg", signature="nnn")
    def _set_fill_rgb(self, *rgb):
        self._set_device_color(DEVICE_RGB, rgb, stroke=False)

    @OPERATORS.register("K", signature="nnnn")
    def _set_stroke_cmyk(self, *cmyk):
        self._set_device_color(DEVICE_CMYK, cmyk, stroke=True)

    @OPERATORS.register("k", signature="nnnn")
    def _set_fill_cmyk(self, *cmyk):
        self._set_device_color(DEVICE_CMYK, cmyk, stroke=False)

    def _store_color(
        self,
        space: ColorSpace,
        components: Tuple[float, ...],
        paint: Paint,
        stroke: bool,
    ) -> None:
        if stroke:
            self.stack.update(
                stroke_space=space, stroke_components=components, stroke_color=paint
            )
        else:
            self.stack.update(
                fill_space=space, fill_components=components, fill_color=paint
            )

    def _select_space(self, space: ColorSpace, stroke: bool) -> None:
        components = space.initial_components()
        paint = self.colors.resolve(space, components, self._operator)
        self._store_color(space, components, paint, stroke)

    def _set_device_color(
        self, space: ColorSpace, components: Tuple[float, ...], stroke: bool
    ) -> None:
        paint = self.colors.resolve(space, components, self._operator)
        self._store_color(space, tuple(components), paint, stroke)

    def _set_color(
        self, components: Tuple[float, ...], name: Optional[str], stroke: bool
    ) -> None:
        gs = self.state
        space = gs.stroke_space if stroke else gs.fill_space
        if space.kind is ColorSpaceKind.PATTERN:
            paint = self.colors.resolve_pattern(space, components, name, self._operator)
        elif name is not None:
            raise FormatViolation(f"Name operand {name} outside a Pattern color space")
        else:
            paint = self.colors.resolve(space, components, self._operator)
        self._store_color(space, components, paint, stroke)

    # --- Text objects and state ---

    @OPERATORS.register("BT", scope=Scope.PAGE)
    def _begin_text(self):
        self.text.begin()

    @OPERATORS.register("ET", scope=Scope.TEXT)
    def _end_text(self):
        self.text.end()

    @OPERATORS.register("Tc", signature="n")
    def _set_char_spacing(self, value):
        self.stack.update_text(char_spacing=value)

    @OPERATORS.register("Tw", signature="n")
    def _set_word_spacing(self, value):
        self.stack.update_text(word_spacing=value)

    @OPERATORS.register("Tz", signature="n")
    def _set_horiz_scaling(self, value):
        self.stack.update_text(horiz_scaling=value)

    @OPERATORS.register("TL", signature="n")
    def _set_leading(self, value):
        self.stack.update_text(leading=value)

    @OPERATORS.register("Ts", signature="n")
    def _set_rise(self, value):
        self.stack.update_text(rise=value)

    @OPERATORS.register("Tr", signature="i")
    def _set_render_mode(self, mode):
        if not 0 <= mode <= 7:
            raise FormatViolation(f"Invalid text rendering mode {mode}")
        self.stack.update_text(render_mode=mode)

    @OPERATORS.register("Tf", signature="Nn")
    def _set_font(self, name, size):
        # Keep the name even if loading fails so Tj knows a font was chosen
        self.stack.update_text(font_name=name, font=None, fontsize=size)
        self.stack.update_text(font=self.resources.font(name))

    # --- Text positioning ---

    @OPERATORS.register("Td", signature="nn", scope=Scope.TEXT)
    def _move_text(self, tx, ty):
        self.text.move(tx, ty)

    @OPERATORS.register("TD", signature="nn", scope=Scope.TEXT)
    def _move_text_set_leading(self, tx, ty):
        self.stack.update_text(leading=-ty)
        self.text.move(tx, ty)

    @OPERATORS.register("Tm", signature="nnnnnn", scope=Scope.TEXT)
    def _set_text_matrix(self, *values):
        self.text.set_matrix(to_matrix(values))

    @OPERATORS.register("T*", scope=Scope.TEXT)
    def _next_line(self):
        self.text.next_line(self.state.text.leading)

    # --- Text showing ---

    @OPERATORS.register("Tj", signature="s", scope=Scope.TEXT)
    def _show_text(self, data):
        self._show(data)

    @OPERATORS.register("TJ", signature="a", scope=Scope.TEXT)
    def _show_text_adjusted(self, items):
        for item in items:
            if isinstance(item, bytes):
                self._show(item)
            elif isinstance(item, (int, float)) and not isinstance(item, bool):
                self.text.adjust(float(item), self.state.text)
            else:
                raise FormatViolation(f"Unexpected TJ element {item!r}")

    @OPERATORS.register("'", signature="s", scope=Scope.TEXT)
    def _next_line_show(self, data):
        self.text.next_line(self.state.text.leading)
        self._show(data)

    @OPERATORS.register('"', signature="nns", scope=Scope.TEXT)
    def _next_line_show_spaced(self, word_spacing, char_spacing, data):
        self.stack.update_text(word_spacing=word_spacing, char_spacing=char_spacing)
        self.text.next_line(self.state.text.leading)
        self._show(data)

    def _show(self, data: bytes) -> None:
        gs = self.state
        ts = gs.text
        if ts.font is None:
            if ts.font_name is None:
                raise FormatViolation("Text shown before a font was selected")
            # The failed Tf has already been recorded
            return

        placements = self.text.show(
            data, ts, gs.ctm, self.diagnostics, self._operator, self.depth
        )
        mode = ts.render_mode
        if mode in INVISIBLE_MODES:
            return
        fill = gs.fill_paint if mode in FILL_MODES else None
        stroke = gs.stroke_paint if mode in STROKE_MODES else None
        style = StrokeStyle.from_state(gs) if stroke is not None else None
        for placement in placements:
            self.scene.append(
                PaintGlyph(
                    placement.code,
                    placement.text,
                    ts.font.name,
                    ts.fontsize,
                    placement.matrix,
                    fill,
                    stroke,
                    gs.clip,
                    style,
                )
            )

    # --- XObjects, images and shadings ---

    @OPERATORS.register("Do", signature="N")
    def _do_xobject(self, name):
        xobj = self.resources.xobject(name)
        subtype = str(xobj.get("/Subtype", ""))
        if subtype == "/Image":
            self.scene.append(
                PaintImage(
                    name,
                    self.state.ctm,
                    self.state.clip,
                    int(xobj.get("/Width", 0)),
                    int(xobj.get("/Height", 0)),
                )
            )
            return
        if subtype != "/Form":
            raise UnsupportedOperator(
                f"XObject {name} has unsupported subtype {subtype or '(none)'}"
            )
        if not self.options.recurse_xobjects:
            raise UnsupportedOperator(f"Form XObject {name} not interpreted")
        if self.depth + 1 > self.options.max_xobject_depth:
            raise RecursionLimitExceeded(
                f"Form XObject {name} nested deeper than "
                f"{self.options.max_xobject_depth} levels"
            )
        key = _object_key(xobj)
        if key is not None and key in self._active_forms:
            raise RecursionLimitExceeded(f"Form XObject {name} invokes itself")
        self.run_form(name, xobj, key)

    def run_form(self, name: str, xobj: Any, key: Optional[Tuple[int, int]] = None):
        """Interpret a form XObject between an implicit save and restore."""
        base = self.stack.depth
        self.stack.save()
        try:
            matrix = xobj.get("/Matrix")
            if matrix is not None:
                self.stack.apply_matrix(to_matrix(normalize_pdf_operand(matrix)))
            bbox = xobj.get("/BBox")
            if bbox is not None:
                x0, y0, x1, y1 = normalize_rect(normalize_pdf_operand(bbox))
                box = Path.from_rect(x0, y0, x1 - x0, y1 - y0).transformed(
                    self.state.ctm
                )
                self.stack.update(clip=self.state.clip.narrowed(box))
            operations = read_operations(xobj)

            logger.debug("Entering Form XObject %s at depth %d", name, self.depth + 1)
            child = ContentInterpreter(
                self.resources.child(xobj.get("/Resources")),
                self.stack,
                self.scene,
                self.diagnostics,
                self.options,
                self.depth + 1,
                self.operators,
                self._active_forms | {key} if key is not None else self._active_forms,
            )
            child.run(operations)
        except (ContentStreamError, ValueError, pikepdf.PdfError) as e:
            raise FormatViolation(f"Form XObject {name}: {e}") from e
        finally:
            self.stack.unwind(base)

    @OPERATORS.register(INLINE_IMAGE, signature="d")
    def _inline_image(self, info):
        self.scene.append(
            PaintImage(
                "inline",
                self.state.ctm,
                self.state.clip,
                int(info.get("/Width", 0)),
                int(info.get("/Height", 0)),
                inline=True,
            )
        )

    @OPERATORS.register("sh", signature="N")
    def _paint_shading(self, name):
        shading = self.resources.shading(name)
        gs = self.state
        paint = self.colors.shading_paint(shading, self._operator)
        self.diagnostics.record(
            DiagnosticKind.UNSUPPORTED_OPERATOR,
            f"Shading {name} approximated by a flat fill",
            self._operator,
            self.depth,
        )
        area = self._shading_area(name, shading)
        self.scene.append(
            FillPath(area, paint.with_opacity(gs.fill_alpha), FillRule.NONZERO, gs.clip)
        )

    def _shading_area(self, name: str, shading: Any) -> Path:
        """Device space area an ``sh`` fills: the shading's /BBox, else the
        clip bounds, else the page."""
        gs = self.state
        bbox = shading.get("/BBox")
        if bbox is not None:
            try:
                x0, y0, x1, y1 = normalize_rect(normalize_pdf_operand(bbox))
                return Path.from_rect(x0, y0, x1 - x0, y1 - y0).transformed(gs.ctm)
            except CONVERSION_ERRORS as e:
                self.diagnostics.record(
                    DiagnosticKind.FORMAT_VIOLATION,
                    f"Ignoring /BBox of shading {name}: {e}",
                    self._operator,
                    self.depth,
                )
        clip_bounds = gs.clip.bounds()
        if clip_bounds is not None:
            x0, y0, x1, y1 = clip_bounds
            return Path.from_rect(x0, y0, x1 - x0, y1 - y0)
        x0, y0, x1, y1 = self.scene.view_box
        return Path.from_rect(x0, y0, x1 - x0, y1 - y0).transformed(
            self.stack.initial.ctm
        )

    # --- Recognised operators with no effect on the scene ---

    @OPERATORS.register("BMC", "MP", signature="N")
    @OPERATORS.register("BDC", "DP", signature="Nd")
    @OPERATORS.register("EMC")
    @OPERATORS.register("d0", signature="nn")
    @OPERATORS.register("d1", signature="nnnnnn")
    def _ignore(self, *args):
        pass

    @OPERATORS.register("BX")
    def _begin_compatibility(self):
        self._compatibility += 1

    @OPERATORS.register("EX")
    def _end_compatibility(self):
        self._compatibility = max(0, self._compatibility - 1)
