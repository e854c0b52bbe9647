"""
Reading and tokenising content streams.

A page's ``/Contents`` may be one stream or an array of streams which are
concatenated before tokenising (a token may span a stream boundary). Form
XObjects are a single stream. Tokenising is done by pikepdf; operands are
converted to plain Python values with
:func:`~pdfscene.utils.pdf_conversion.normalize_pdf_operand`.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Sequence

import pikepdf
from pikepdf.models import PdfParsingError

from .errors import ContentStreamError
from .utils.pdf_conversion import normalize_pdf_operand

logger = logging.getLogger(__name__)

INLINE_IMAGE = "INLINE IMAGE"


@dataclass
class Operation:
    """One operator with its normalised operands."""

    operator: str
    operands: List[Any]


def _operator_name(op: Any) -> str:
    if isinstance(op, (str, bytes)):
        return op.decode("latin1") if isinstance(op, bytes) else op
    return op.unparse().decode("latin1")


def _inline_image_info(iimage: Any) -> dict:
    """Size of an inline image; its data is not needed."""
    try:
        return {"/Width": int(iimage.width), "/Height": int(iimage.height)}
    except (AttributeError, KeyError, TypeError, ValueError, pikepdf.PdfError):
        return {"/Width": 0, "/Height": 0}


def parse_operations(data: bytes) -> List[Operation]:
    """Tokenise content stream bytes.

    Raises:
        ContentStreamError: pikepdf could not tokenise the data.
    """
    if not data.strip():
        return []
    scratch = pikepdf.new()
    try:
        stream = pikepdf.Stream(scratch, data)
        instructions = pikepdf.parse_content_stream(stream)
    except (pikepdf.PdfError, PdfParsingError, ValueError) as e:
        raise ContentStreamError(f"Could not tokenise content stream: {e}") from e

    operations = []
    for instruction in instructions:
        if isinstance(instruction, pikepdf.ContentStreamInlineImage):
            operations.append(
                Operation(INLINE_IMAGE, [_inline_image_info(instruction.iimage)])
            )
            continue
        operations.append(
            Operation(
                _operator_name(instruction.operator),
                [normalize_pdf_operand(x) for x in instruction.operands],
            )
        )
    return operations


def read_operations(container: Any) -> List[Operation]:
    """Tokenise the content of a page, form XObject or raw bytes.

    Raises:
        ContentStreamError: The content could not be read or tokenised.
    """
    try:
        streams = get_content_streams(container)
        data = consolidate_streams(streams)
    except pikepdf.PdfError as e:
        raise ContentStreamError(f"Could not read content stream: {e}") from e
    return parse_operations(data)


def consolidate_streams(streams: Sequence[Any]) -> bytes:
    """Concatenate stream data, separating the parts with whitespace."""
    combined = bytearray()
    for s in streams:
        if isinstance(s, bytes):
            data = s
        elif hasattr(s, "read_bytes"):
            data = s.read_bytes()
        else:
            data = str(s).encode("latin1")
        combined.extend(data)
        if not data[-1:].isspace():
            combined.extend(b"\n")
    return bytes(combined)


def get_content_streams(container: Any) -> List[Any]:
    """
    Return a flat list of content streams from a Page, Stream, Array or bytes.
    """
    raw_contents = _resolve_raw_contents(container)
    clean_streams: List[Any] = []
    for item in _normalize_to_list(raw_contents):
        clean_streams.extend(_process_content_item(item))
    return clean_streams


def _resolve_raw_contents(container: Any) -> Any:
    """Resolve a Page to its /Contents, which may be absent."""
    if isinstance(container, pikepdf.Page):
        return container.obj.get("/Contents", [])
    return container


def _normalize_to_list(raw_contents: Any) -> List[Any]:
    if raw_contents is None:
        return []
    if isinstance(raw_contents, (list, tuple, pikepdf.Array)):
        return list(raw_contents)
    return [raw_contents]


def _process_content_item(item: Any) -> List[Any]:
    if isinstance(item, (bytes, bytearray)):
        return [bytes(item)]

    if isinstance(item, pikepdf.Stream):
        return [item]

    if _is_page_dict(item):
        return get_content_streams(item.get("/Contents", []))

    logger.warning("Skipping invalid content item (not a stream): %r", item)
    return []


def _is_page_dict(item: Any) -> bool:
    return (
        isinstance(item, pikepdf.Dictionary)
        and "/Type" in item
        and item["/Type"] == "/Page"
    )
