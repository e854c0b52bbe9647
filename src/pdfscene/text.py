"""Text state and glyph positioning.

:class:`TextState` holds the text parameters that belong to the graphics
state (and so are saved by ``q``). The text matrix and text line matrix only
exist inside a ``BT``/``ET`` object and live in :class:`TextLayout`.

Matrix arithmetic follows PDF's row-vector convention: a glyph's device
position is ``params x Tm x CTM``, see :meth:`TextLayout.render_matrix`.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from .errors import DiagnosticLog, GlyphNotFound
from .fonts import FontModel
from .utils.pdf_geometry import IDENTITY, Matrix, multiply, translation

logger = logging.getLogger(__name__)

# Tr values that paint glyph outlines
FILL_MODES = frozenset({0, 2, 4, 6})
STROKE_MODES = frozenset({1, 2, 5, 6})
INVISIBLE_MODES = frozenset({3, 7})


@dataclass(frozen=True)
class TextState:  # pylint: disable=too-many-instance-attributes
    """The text parameters of the graphics state.

    Attributes:
        font_name: Resource name of the current font (e.g. ``"/F1"``).
        font: The loaded font, or ``None`` if none is selected or it
            failed to load.
        fontsize: Text font size (``Tfs``).
        char_spacing: Character spacing (``Tc``).
        word_spacing: Word spacing (``Tw``).
        horiz_scaling: Horizontal scaling (``Tz``) in percent.
        leading: Text leading (``TL``).
        rise: Text rise (``Ts``).
        render_mode: Text rendering mode (``Tr``).
        knockout: Text knockout flag (``/TK``).
    """

    font_name: Optional[str] = None
    font: Optional[FontModel] = None
    fontsize: float = 0.0
    char_spacing: float = 0.0
    word_spacing: float = 0.0
    horiz_scaling: float = 100.0
    leading: float = 0.0
    rise: float = 0.0
    render_mode: int = 0
    knockout: bool = True

    @property
    def scale(self) -> float:
        """Horizontal scaling as a factor."""
        return self.horiz_scaling / 100.0


@dataclass(frozen=True)
class GlyphPlacement:
    """One shown glyph.

    Attributes:
        code: Character code in the font's encoding.
        text: Unicode text for the code, if the font knows it.
        matrix: Glyph space to device space transform at the glyph origin.
        advance: Horizontal displacement applied to the text matrix.
    """

    code: int
    text: Optional[str]
    matrix: Matrix
    advance: float


class TextLayout:
    """The text matrix (``Tm``) and text line matrix (``Tlm``).

    Both are reset to the identity by ``BT``. Positioning operators update
    the line matrix and copy it into the text matrix; showing text advances
    the text matrix only.
    """

    def __init__(self):
        self.matrix: Matrix = IDENTITY
        self.line_matrix: Matrix = IDENTITY
        self.active = False

    def begin(self) -> None:
        self.active = True
        self.matrix = self.line_matrix = IDENTITY

    def end(self) -> None:
        self.active = False

    def set_matrix(self, m: Matrix) -> None:
        """``Tm``: replace both matrices."""
        self.matrix = self.line_matrix = m

    def move(self, tx: float, ty: float) -> None:
        """``Td``: start a new line offset from the start of the current one."""
        self.line_matrix = multiply(translation(tx, ty), self.line_matrix)
        self.matrix = self.line_matrix

    def next_line(self, leading: float) -> None:
        """``T*``: equivalent to ``0 -leading Td``."""
        self.move(0.0, -leading)

    def advance(self, tx: float) -> None:
        self.matrix = multiply(translation(tx, 0.0), self.matrix)

    def adjust(self, amount: float, text_state: TextState) -> None:
        """Apply a ``TJ`` number, given in thousandths of text space."""
        self.advance(-amount / 1000.0 * text_state.fontsize * text_state.scale)

    def render_matrix(self, text_state: TextState, ctm: Matrix) -> Matrix:
        """Text space to device space, with size, scaling and rise applied."""
        params = (
            text_state.fontsize * text_state.scale,
            0.0,
            0.0,
            text_state.fontsize,
            0.0,
            text_state.rise,
        )
        return multiply(multiply(params, self.matrix), ctm)

    def show(
        self,
        data: bytes,
        text_state: TextState,
        ctm: Matrix,
        diagnostics: Optional[DiagnosticLog] = None,
        operator: Optional[str] = None,
        depth: int = 0,
    ) -> List[GlyphPlacement]:
        """Lay out a string operand, advancing the text matrix.

        Codes without metrics are skipped (with a ``GlyphNotFound``
        diagnostic) and advance by the default width.

        Returns:
            The placements of the glyphs that were found.
        """
        font = text_state.font
        if font is None:
            return []
        font_matrix = font.font_matrix
        multibyte = font.is_multibyte()
        placements = []
        for code in font.decode(data):
            try:
                width = font.advance(code)
                found = True
            except GlyphNotFound as err:
                if diagnostics is not None:
                    diagnostics.record_error(err, operator, depth)
                width = err.default_advance
                found = False

            tx = width * font_matrix[0] * text_state.fontsize + text_state.char_spacing
            if code == 32 and not multibyte:
                tx += text_state.word_spacing
            tx *= text_state.scale

            if found:
                placements.append(
                    GlyphPlacement(
                        code,
                        font.to_unicode(code),
                        multiply(font_matrix, self.render_matrix(text_state, ctm)),
                        tx,
                    )
                )
            self.advance(tx)
        return placements
