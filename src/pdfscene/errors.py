"""Error taxonomy and per-page diagnostics.

Recoverable conditions are raised as :class:`RecoverableError` subclasses by
the component that detects them and caught by the interpreter, which records
a :class:`Diagnostic` and carries on. Only :class:`ContentStreamError` is
fatal to a page.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional

logger = logging.getLogger(__name__)


class DiagnosticKind(Enum):
    """The kinds of recovered conditions recorded while interpreting a page."""

    STATE_UNDERFLOW = "StateUnderflow"
    FORMAT_VIOLATION = "FormatViolation"
    UNSUPPORTED_OPERATOR = "UnsupportedOperator"
    INVALID_COLOR_INDEX = "InvalidColorIndex"
    GLYPH_NOT_FOUND = "GlyphNotFound"
    RESOURCE_MISSING = "ResourceMissing"
    RECURSION_LIMIT_EXCEEDED = "RecursionLimitExceeded"


# Conditions common enough in real files that they only log at DEBUG
_QUIET_KINDS = {DiagnosticKind.STATE_UNDERFLOW, DiagnosticKind.GLYPH_NOT_FOUND}


@dataclass(frozen=True)
class Diagnostic:
    """A recovered condition.

    Attributes:
        kind: What went wrong.
        message: Human readable detail.
        operator: The content stream operator being executed, if any.
        depth: Form XObject nesting depth (0 for the page itself).
    """

    kind: DiagnosticKind
    message: str
    operator: Optional[str] = None
    depth: int = 0


# Raised when a malformed PDF object is read as if it were well formed
CONVERSION_ERRORS = (
    AttributeError,
    IndexError,
    KeyError,
    TypeError,
    ValueError,
    OverflowError,
)


class PdfSceneError(Exception):
    """Base class for all errors raised by pdfscene."""


class ContentStreamError(PdfSceneError):
    """The content of a page could not be read or tokenised at all."""


class RecoverableError(PdfSceneError):
    """A condition the interpreter recovers from by recording a diagnostic."""

    kind = DiagnosticKind.FORMAT_VIOLATION


class StateUnderflow(RecoverableError):
    kind = DiagnosticKind.STATE_UNDERFLOW


class FormatViolation(RecoverableError):
    kind = DiagnosticKind.FORMAT_VIOLATION


class UnsupportedOperator(RecoverableError):
    kind = DiagnosticKind.UNSUPPORTED_OPERATOR


class InvalidColorIndex(RecoverableError):
    kind = DiagnosticKind.INVALID_COLOR_INDEX


class RecursionLimitExceeded(RecoverableError):
    kind = DiagnosticKind.RECURSION_LIMIT_EXCEEDED


class GlyphNotFound(RecoverableError):
    """The font has no metrics for a character code.

    Args:
        code: The character code.
        default_advance: The advance (glyph space units) to use instead.
    """

    kind = DiagnosticKind.GLYPH_NOT_FOUND

    def __init__(self, code: int, default_advance: float = 0.0):
        super().__init__(f"No glyph metrics for character code {code}")
        self.code = code
        self.default_advance = default_advance


class ResourceMissing(RecoverableError):
    """A named resource is absent from the resource dictionary."""

    kind = DiagnosticKind.RESOURCE_MISSING

    def __init__(self, category: str, name: str, detail: str = ""):
        message = f"{category} resource {name} not found"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.category = category
        self.name = name


class DiagnosticLog:
    """Collects the diagnostics of one page interpretation."""

    def __init__(self):
        self.records: List[Diagnostic] = []

    def record(
        self,
        kind: DiagnosticKind,
        message: str,
        operator: Optional[str] = None,
        depth: int = 0,
        level: Optional[int] = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(kind, message, operator, depth)
        self.records.append(diagnostic)
        if level is None:
            level = logging.DEBUG if kind in _QUIET_KINDS else logging.WARNING
        logger.log(level, "%s [%s]: %s", kind.value, operator or "-", message)
        return diagnostic

    def record_error(
        self, error: RecoverableError, operator: Optional[str] = None, depth: int = 0
    ) -> Diagnostic:
        return self.record(error.kind, str(error), operator, depth)

    def count(self, kind: DiagnosticKind) -> int:
        return sum(1 for d in self.records if d.kind is kind)

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self.records if d.kind is kind]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __repr__(self):
        return f"DiagnosticLog({len(self.records)} records)"
