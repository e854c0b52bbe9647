# src/pdfscene/__init__.py
"""
pdfscene: interpret PDF page content streams into vector scenes.

A page's content stream is replayed against PDF's graphics state model and
turned into an ordered list of self-contained draw commands (filled and
stroked paths in device space, clip intersections, glyph placements and
image placements), ready for rasterisation or export.

This library uses `pikepdf` to read the document and tokenise content
streams, and `pdfminer` as its font model (encodings and glyph widths).
"""
import logging

from .api import interpret_content, interpret_page, process
from .clip import ClipRegion, FillRule
from .color import Paint
from .errors import (
    ContentStreamError,
    Diagnostic,
    DiagnosticKind,
    DiagnosticLog,
    PdfSceneError,
)
from .fonts import MappingFontLoader, PdfMinerFontLoader, SimpleFontModel
from .interpreter import ContentInterpreter
from .options import ProcessingOptions
from .path import Path
from .scene import (
    ClipIntersect,
    FillAndStrokePath,
    FillPath,
    PageResult,
    PaintGlyph,
    PaintImage,
    Scene,
    StrokePath,
    StrokeStyle,
)
from .state import GraphicsState, GraphicsStateStack
from .svg import scene_to_svg, write_svg


# pylint: disable=too-few-public-methods
class SuppressFontBBoxWarning(logging.Filter):
    """Suppress a warning from pdfminer"""

    def filter(self, record):
        # Return False to suppress the log, True to allow it
        return (
            "get FontBBox from font descriptor because None cannot be parsed"
            not in record.getMessage()
        )


# Attach filter to the specific logger used by pdfminer.pdffont
logging.getLogger("pdfminer.pdffont").addFilter(SuppressFontBBoxWarning())


__all__ = [
    "process",
    "interpret_page",
    "interpret_content",
    "scene_to_svg",
    "write_svg",
    "ProcessingOptions",
    "ContentInterpreter",
    "PageResult",
    "Scene",
    "FillPath",
    "StrokePath",
    "FillAndStrokePath",
    "ClipIntersect",
    "PaintGlyph",
    "PaintImage",
    "StrokeStyle",
    "Path",
    "Paint",
    "ClipRegion",
    "FillRule",
    "GraphicsState",
    "GraphicsStateStack",
    "PdfMinerFontLoader",
    "MappingFontLoader",
    "SimpleFontModel",
    "PdfSceneError",
    "ContentStreamError",
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticLog",
]
