# src/pdfscene/utils/pdf_conversion.py
from decimal import Decimal
from typing import Any, Optional, Set

import pikepdf
from pdfminer.pdftypes import PDFStream
from pdfminer.psparser import LIT, PSKeyword, PSLiteral


def normalize_pdf_operand(operand: Any) -> Any:
    """
    Converts pikepdf operand objects into plain Python values.

    Numbers become ``int``/``float``, names become ``str`` including the
    leading slash (``"/F1"``), strings become ``bytes`` and arrays become
    lists. Dictionaries and inline images are passed through unchanged.
    """
    if isinstance(operand, bool) or operand is None:
        return operand
    if isinstance(operand, (int, float)):
        return operand
    if isinstance(operand, Decimal):
        return float(operand)
    if isinstance(operand, pikepdf.Name):
        return str(operand)
    if isinstance(operand, pikepdf.String):
        return bytes(operand)
    if isinstance(operand, (PSLiteral, PSKeyword)):
        name = operand.name
        if isinstance(name, bytes):
            name = name.decode("ascii")
        return f"/{name}"
    if isinstance(operand, bytes):
        return operand
    if isinstance(operand, (pikepdf.Array, list, tuple)):
        return [normalize_pdf_operand(x) for x in operand]
    return operand


def to_pdfminer(obj: Any, strip_slash=False, _seen: Optional[Set] = None) -> Any:
    """Recursively converts pikepdf objects to types pdfminer understands.

    Indirect objects already on the conversion path are replaced by ``None``
    so that cyclic font structures terminate.
    """
    if _seen is None:
        _seen = set()

    key = _indirect_key(obj)
    if key is not None:
        if key in _seen:
            return None
        _seen = _seen | {key}

    result = obj
    if isinstance(obj, pikepdf.Stream):
        attrs = to_pdfminer(obj.stream_dict, _seen=_seen)
        # pdfminer applies the /Filter chain itself
        result = PDFStream(attrs, obj.read_raw_bytes())
    elif isinstance(obj, pikepdf.Dictionary):
        result = {
            to_pdfminer(k, strip_slash=True, _seen=_seen): to_pdfminer(v, _seen=_seen)
            for k, v in obj.items()
        }
    elif isinstance(obj, pikepdf.Array):
        result = [to_pdfminer(v, _seen=_seen) for v in obj]
    elif isinstance(obj, (str, pikepdf.String)):
        s = str(obj)
        if strip_slash and s.startswith("/"):
            result = s[1:]
        elif isinstance(obj, pikepdf.String):
            result = bytes(obj)
        else:
            result = s
    elif isinstance(obj, pikepdf.Name):
        result = LIT(str(obj)[1:])
    elif isinstance(obj, Decimal):
        result = float(obj)
    return result


def _indirect_key(obj: Any):
    if not isinstance(obj, (pikepdf.Dictionary, pikepdf.Array, pikepdf.Stream)):
        return None
    try:
        if obj.is_indirect:
            return obj.objgen
    except (AttributeError, pikepdf.PdfError):
        pass
    return None
