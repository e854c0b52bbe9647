"""
Utility modules for data conversion and geometric calculations.
"""
from .pdf_conversion import (
    normalize_pdf_operand,
    to_pdfminer,
)
from .pdf_geometry import IDENTITY, multiply, to_matrix, transform_point

__all__ = [
    "IDENTITY",
    "multiply",
    "normalize_pdf_operand",
    "to_matrix",
    "to_pdfminer",
    "transform_point",
]
