"""
Serialise a :class:`~pdfscene.scene.Scene` as SVG.

The scene is in PDF device space (origin lower-left, y up). All drawing is
placed inside one root group whose transform applies the page rotation and
flips the y axis, so element geometry is written in device coordinates
unchanged.

Clip regions are lazy intersections; each entry becomes a ``<clipPath>`` and
a drawing element is wrapped in one nested group per entry. Consecutive
commands sharing a clip share the groups.
"""
import logging
import math
import os
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional, Tuple, Union

from .clip import ClipEntry, ClipRegion, FillRule
from .color import Paint
from .path import CurveSegment, Path
from .scene import (
    ClipIntersect,
    DrawCommand,
    FillAndStrokePath,
    FillPath,
    PaintGlyph,
    PaintImage,
    Scene,
    StrokePath,
    StrokeStyle,
)
from .utils.pdf_geometry import Matrix, determinant, multiply, scaling, translation

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"

_CAPS = {0: "butt", 1: "round", 2: "square"}
_JOINS = {0: "miter", 1: "round", 2: "bevel"}

# Glyph space is taken to be 1000 units per em
GLYPH_EM = 1000


def fmt(value: float) -> str:
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def matrix_attr(m: Matrix) -> str:
    return "matrix(" + " ".join(fmt(v) for v in m) + ")"


def path_data(path: Path) -> str:
    """The SVG ``d`` attribute for a path."""
    parts: List[str] = []
    for subpath in path.subpaths:
        parts.append(f"M{fmt(subpath.start[0])} {fmt(subpath.start[1])}")
        for seg in subpath.segments:
            if isinstance(seg, CurveSegment):
                coords = " ".join(f"{fmt(x)} {fmt(y)}" for x, y in seg.points)
                parts.append(f"C{coords}")
            else:
                parts.append(f"L{fmt(seg.end[0])} {fmt(seg.end[1])}")
        if subpath.closed:
            parts.append("Z")
    return "".join(parts)


def _rule(rule: FillRule) -> str:
    return "evenodd" if rule is FillRule.EVEN_ODD else "nonzero"


def _set_fill(el: ET.Element, paint: Optional[Paint], rule: Optional[FillRule] = None):
    if paint is None:
        el.set("fill", "none")
        return
    el.set("fill", paint.hex)
    if rule is not None:
        el.set("fill-rule", _rule(rule))
    if paint.alpha < 1.0:
        el.set("fill-opacity", fmt(paint.alpha))


def _set_stroke(el: ET.Element, paint: Optional[Paint], style: Optional[StrokeStyle]):
    if paint is None or style is None:
        el.set("stroke", "none")
        return
    el.set("stroke", paint.hex)
    # Zero width means the thinnest line the device can show
    width = style.device_width
    el.set("stroke-width", fmt(width) if width > 0 else "1")
    el.set("stroke-linecap", _CAPS.get(style.cap, "butt"))
    el.set("stroke-linejoin", _JOINS.get(style.join, "miter"))
    el.set("stroke-miterlimit", fmt(max(style.miter_limit, 1.0)))
    dashes, phase = style.device_dash
    if dashes and any(dashes):
        el.set("stroke-dasharray", " ".join(fmt(d) for d in dashes))
        if phase:
            el.set("stroke-dashoffset", fmt(phase))
    if paint.alpha < 1.0:
        el.set("stroke-opacity", fmt(paint.alpha))


def root_transform(scene: Scene) -> Tuple[Matrix, float, float]:
    """Device space to SVG space, and the SVG width and height."""
    x0, y0, x1, y1 = scene.view_box
    width, height = x1 - x0, y1 - y0
    rotate = scene.rotate % 360
    # Quarter turns clockwise, as seen on screen
    turns = {
        0: (1.0, 0.0, 0.0, 1.0, 0.0, 0.0),
        90: (0.0, -1.0, 1.0, 0.0, 0.0, width),
        180: (-1.0, 0.0, 0.0, -1.0, width, height),
        270: (0.0, 1.0, -1.0, 0.0, height, 0.0),
    }
    turn = turns.get(rotate, turns[0])
    if rotate in (90, 270):
        width, height = height, width
    m = multiply(translation(-x0, -y0), turn)
    m = multiply(m, multiply(scaling(1.0, -1.0), translation(0.0, height)))
    return m, width, height


class SvgWriter:
    """Builds the SVG element tree for one scene."""

    def __init__(self, scene: Scene):
        self.scene = scene
        self._clip_ids: Dict[ClipEntry, str] = {}
        self._defs: Optional[ET.Element] = None
        self._top: Optional[ET.Element] = None
        self._current_clip: Optional[ClipRegion] = None
        self._current_parent: Optional[ET.Element] = None

    def build(self) -> ET.Element:
        transform, width, height = root_transform(self.scene)
        root = ET.Element(
            "svg",
            {
                "xmlns": SVG_NS,
                "width": fmt(width),
                "height": fmt(height),
                "viewBox": f"0 0 {fmt(width)} {fmt(height)}",
            },
        )
        self._defs = ET.SubElement(root, "defs")
        self._top = ET.SubElement(root, "g", {"transform": matrix_attr(transform)})
        for command in self.scene:
            self._write(command)
        if not len(self._defs):
            root.remove(self._defs)
        return root

    def _write(self, command: DrawCommand) -> None:
        if isinstance(command, ClipIntersect):
            # The clip is applied through the commands that follow
            return
        parent = self._parent_for(command.clip)
        if isinstance(command, FillPath):
            el = ET.SubElement(parent, "path", {"d": path_data(command.path)})
            _set_fill(el, command.paint, command.rule)
            el.set("stroke", "none")
        elif isinstance(command, StrokePath):
            el = ET.SubElement(parent, "path", {"d": path_data(command.path)})
            el.set("fill", "none")
            _set_stroke(el, command.paint, command.style)
        elif isinstance(command, FillAndStrokePath):
            el = ET.SubElement(parent, "path", {"d": path_data(command.path)})
            _set_fill(el, command.fill, command.rule)
            _set_stroke(el, command.stroke, command.style)
        elif isinstance(command, PaintGlyph):
            self._write_glyph(parent, command)
        elif isinstance(command, PaintImage):
            ET.SubElement(
                parent,
                "rect",
                {
                    "x": "0",
                    "y": "0",
                    "width": "1",
                    "height": "1",
                    "transform": matrix_attr(command.matrix),
                    "fill": "#cccccc",
                    "fill-opacity": "0.5",
                    "data-image": command.name,
                },
            )
        else:
            logger.debug("No SVG rendering for %r", command)

    def _write_glyph(self, parent: ET.Element, glyph: PaintGlyph) -> None:
        if not glyph.text or not glyph.text.strip():
            return
        # SVG text is drawn y-down; flip it back into glyph space
        m = multiply(scaling(1.0, -1.0), glyph.matrix)
        el = ET.SubElement(
            parent,
            "text",
            {"transform": matrix_attr(m), "font-size": str(GLYPH_EM)},
        )
        el.set("font-family", glyph.font_name)
        _set_fill(el, glyph.fill)
        _set_stroke(el, glyph.stroke, glyph.style)
        if glyph.stroke is not None and glyph.style is not None:
            # stroke-width is in glyph units inside the text transform
            scale = math.sqrt(abs(determinant(m))) or 1.0
            el.set("stroke-width", fmt(max(glyph.style.device_width, 1e-3) / scale))
        el.text = glyph.text

    def _parent_for(self, clip: ClipRegion) -> ET.Element:
        if self._current_parent is not None and clip.entries == getattr(
            self._current_clip, "entries", None
        ):
            return self._current_parent
        parent = self._top
        for entry in clip.entries:
            parent = ET.SubElement(
                parent, "g", {"clip-path": f"url(#{self._clip_id(entry)})"}
            )
        self._current_clip, self._current_parent = clip, parent
        return parent

    def _clip_id(self, entry: ClipEntry) -> str:
        if entry not in self._clip_ids:
            clip_id = f"clip{len(self._clip_ids)}"
            self._clip_ids[entry] = clip_id
            clip_path = ET.SubElement(
                self._defs,
                "clipPath",
                {"id": clip_id, "clipPathUnits": "userSpaceOnUse"},
            )
            ET.SubElement(
                clip_path,
                "path",
                {"d": path_data(entry.path), "clip-rule": _rule(entry.rule)},
            )
        return self._clip_ids[entry]


def scene_to_svg(scene: Scene) -> str:
    """Return the scene as an SVG document string."""
    return ET.tostring(SvgWriter(scene).build(), encoding="unicode")


def write_svg(scene: Scene, path: Union[str, os.PathLike]) -> None:
    """Write the scene to an SVG file."""
    tree = ET.ElementTree(SvgWriter(scene).build())
    tree.write(path, encoding="utf-8", xml_declaration=True)
    logger.debug("Wrote %d commands to %s", len(scene), path)
