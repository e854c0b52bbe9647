"""
Public API: interpret PDF pages into scenes.
"""
# src/pdfscene/api.py

import logging
from typing import Any, List, Optional, Union

import numpy as np
import pikepdf

from .content import parse_operations, read_operations
from .errors import ContentStreamError, DiagnosticLog
from .interpreter import ContentInterpreter
from .options import ProcessingOptions
from .resources import ResourceSet
from .scene import PageResult, Scene
from .state import GraphicsState, GraphicsStateStack
from .utils.pdf_geometry import (
    Box,
    Matrix,
    bounding_box,
    multiply,
    normalize_rect,
    rotation,
    transform_points,
    translation,
)

logger = logging.getLogger(__name__)

LETTER: Box = (0.0, 0.0, 612.0, 792.0)

# Page attributes that may be inherited from the page tree
INHERITABLE = ("/Resources", "/MediaBox", "/CropBox", "/Rotate")


def page_transform(view_box: Box, rotate: int) -> Matrix:
    """Matrix taking a page box, rotated clockwise by ``rotate`` degrees,
    to a space whose origin is the lower-left corner of the rotated box."""
    x0, y0, x1, y1 = view_box
    m = multiply(translation(-x0, -y0), rotation(-rotate))
    width, height = x1 - x0, y1 - y0
    corners = transform_points(m, np.array([[0, 0], [width, 0], [0, height], [width, height]]))
    min_x, min_y, _, _ = bounding_box(corners)
    return multiply(m, translation(-min_x, -min_y))


def rotated_size(view_box: Box, rotate: int):
    width, height = view_box[2] - view_box[0], view_box[3] - view_box[1]
    if rotate % 180 == 90:
        return height, width
    return width, height


def _inherited(page_dict: Any, key: str) -> Any:
    """Look up a page attribute, following /Parent links for inheritable keys."""
    node = page_dict
    seen = set()
    while node is not None:
        value = node.get(key)
        if value is not None or key not in INHERITABLE:
            return value
        try:
            marker = node.objgen if node.is_indirect else id(node)
        except AttributeError:
            marker = id(node)
        if marker in seen:
            break
        seen.add(marker)
        node = node.get("/Parent")
    return None


def _interpret(
    operations,
    resources: Any,
    options: ProcessingOptions,
    view_box: Box,
    rotate: int = 0,
) -> PageResult:
    initial = GraphicsState()
    if options.apply_page_transform:
        initial = GraphicsState(ctm=page_transform(view_box, rotate))
        width, height = rotated_size(view_box, rotate)
        view_box, rotate = (0.0, 0.0, width, height), 0

    scene = Scene(view_box=view_box, rotate=rotate)
    diagnostics = DiagnosticLog()
    interpreter = ContentInterpreter(
        ResourceSet(resources, options.font_loader),
        GraphicsStateStack(initial),
        scene,
        diagnostics,
        options,
    )
    interpreter.run(operations)
    logger.debug(
        "Interpreted %d operations: %d commands, %d diagnostics",
        len(operations),
        len(scene),
        len(diagnostics),
    )
    return PageResult(scene, diagnostics)


def interpret_page(
    page: Union[pikepdf.Page, pikepdf.Dictionary],
    options: Optional[ProcessingOptions] = None,
) -> PageResult:
    """Interprets a PDF page into a scene.

    Args:
        page: The :class:`pikepdf.Page` (or page dictionary) to interpret.
        options: Configuration options. If ``None``, defaults are used.

    Returns:
        PageResult: The scene and the diagnostics recorded while building it.

    Raises:
        ContentStreamError: The page content could not be read or tokenised.
        TypeError: ``page`` is not a page.
    """
    if isinstance(page, pikepdf.Dictionary):
        page = pikepdf.Page(page)
    if not isinstance(page, pikepdf.Page):
        raise TypeError(f"Expected a pikepdf.Page, got {type(page).__name__}")
    if options is None:
        options = ProcessingOptions()

    page_dict = page.obj
    media_box = _inherited(page_dict, "/MediaBox")
    try:
        view_box = normalize_rect(media_box) if media_box is not None else LETTER
    except (TypeError, ValueError):
        logger.warning("Malformed MediaBox %r, using US Letter", media_box)
        view_box = LETTER
    try:
        rotate = int(_inherited(page_dict, "/Rotate") or 0) % 360
    except (TypeError, ValueError):
        rotate = 0
    if rotate % 90:
        logger.warning("Ignoring /Rotate %d, not a multiple of 90", rotate)
        rotate = 0

    operations = read_operations(page)
    return _interpret(
        operations, _inherited(page_dict, "/Resources"), options, view_box, rotate
    )


def interpret_content(
    data: Union[bytes, str],
    resources: Any = None,
    options: Optional[ProcessingOptions] = None,
    view_box: Optional[Box] = None,
) -> PageResult:
    """Interprets raw content stream bytes.

    Args:
        data: The content stream.
        resources: A ``/Resources`` dictionary, or ``None``.
        options: Configuration options. If ``None``, defaults are used.
        view_box: The box reported as the scene's view box. Defaults to
            US Letter.

    Raises:
        ContentStreamError: ``data`` could not be tokenised.
        TypeError: ``data`` is not bytes or str.
    """
    if isinstance(data, str):
        data = data.encode("latin1")
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError(f"Expected content stream bytes, got {type(data).__name__}")
    if options is None:
        options = ProcessingOptions()
    box = normalize_rect(view_box) if view_box is not None else LETTER
    return _interpret(parse_operations(bytes(data)), resources, options, box)


def process(
    pdf: pikepdf.Pdf,
    pages: Union[None, int, pikepdf.Page, List[Union[int, pikepdf.Page]]] = None,
    options: Optional[ProcessingOptions] = None,
) -> List[PageResult]:
    """High-level entry point: interpret several pages.

    A page whose content cannot be read at all gives a result with an empty
    scene and ``error`` set; the other pages are still interpreted.

    Args:
        pdf: The :class:`pikepdf.Pdf` object to process.
        pages: The pages to process. Can be a single integer (0-indexed),
            a single Page object, a list of integers/Pages, or None (processes all pages).
        options: Configuration options.

    Raises:
        TypeError: If ``pdf`` is not a pikepdf object or ``pages`` contains invalid types.
    """
    if not isinstance(pdf, pikepdf.Pdf):
        raise TypeError("The 'pdf' argument must be a pikepdf.Pdf object.")
    if options is None:
        options = ProcessingOptions()

    results = []
    for index, page in enumerate(_resolve_pages(pdf, pages)):
        try:
            results.append(interpret_page(page, options))
        except ContentStreamError as e:
            logger.error("Page %d could not be interpreted: %s", index, e)
            results.append(PageResult(Scene(), DiagnosticLog(), error=e))
    return results


def _resolve_pages(pdf: pikepdf.Pdf, pages_arg) -> List[pikepdf.Page]:
    """Helper to normalize the flexible 'pages' argument."""
    if pages_arg is None:
        return list(pdf.pages)

    if isinstance(pages_arg, int):
        return [pdf.pages[pages_arg]]

    if isinstance(pages_arg, pikepdf.Page):
        return [pages_arg]

    if isinstance(pages_arg, (list, tuple)):
        resolved = []
        for item in pages_arg:
            if isinstance(item, int):
                resolved.append(pdf.pages[item])
            elif isinstance(item, pikepdf.Page):
                resolved.append(item)
            else:
                raise TypeError(f"Invalid item in 'pages' list: {type(item)}")
        return resolved

    raise TypeError(f"Invalid type for 'pages' argument: {type(pages_arg)}")
