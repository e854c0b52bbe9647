"""Font models used by the text layout engine.

The interpreter only needs three things from a font: how to split a string
operand into character codes, the advance width of each code and the font
matrix mapping glyph space to text space. :class:`PdfMinerFont` provides
them from a pdfminer font object; :class:`SimpleFontModel` provides them from
a plain width table.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple

from pdfminer.pdffont import PDFUnicodeNotDefined
from pdfminer.pdfinterp import PDFResourceManager
from pdfminer.psparser import PSException

from .errors import CONVERSION_ERRORS, GlyphNotFound, ResourceMissing
from .utils.pdf_conversion import to_pdfminer
from .utils.pdf_geometry import Matrix, to_matrix

logger = logging.getLogger(__name__)

DEFAULT_FONT_MATRIX: Matrix = (0.001, 0.0, 0.0, 0.001, 0.0, 0.0)


class FontModel(Protocol):
    """What the text layout engine needs from a font."""

    name: str
    font_matrix: Matrix

    def decode(self, data: bytes) -> List[int]:
        """Split a string operand into character codes."""

    def advance(self, code: int) -> float:
        """Horizontal advance of ``code`` in glyph space units.

        Raises:
            GlyphNotFound: The font has no width for ``code``.
        """

    def to_unicode(self, code: int) -> Optional[str]:
        """Text for ``code``, or ``None`` if unknown."""

    def is_multibyte(self) -> bool:
        """True for composite fonts, where word spacing does not apply."""


class FontLoader(Protocol):
    """Turns a font resource into a :class:`FontModel`."""

    def load(self, name: str, font_dict: Any) -> FontModel:
        """Load the font named ``name``.

        Args:
            name: The resource name (e.g. ``"/F1"``).
            font_dict: The font dictionary, or ``None`` if the resource
                dictionary has no such entry.

        Raises:
            ResourceMissing: The font cannot be provided.
        """


class SimpleFontModel:
    """A single-byte font defined by a width table.

    Args:
        name: Font name.
        widths: Advance widths in glyph space units, keyed by character code.
        default_width: Width for codes missing from ``widths``. Zero makes
            missing codes raise :class:`~pdfscene.errors.GlyphNotFound`.
        font_matrix: Glyph space to text space matrix.
    """

    def __init__(
        self,
        name: str = "Simple",
        widths: Optional[Mapping[int, float]] = None,
        default_width: float = 0.0,
        font_matrix: Matrix = DEFAULT_FONT_MATRIX,
    ):
        self.name = name
        self.widths = dict(widths or {})
        self.default_width = default_width
        self.font_matrix = font_matrix

    @classmethod
    def monospace(cls, width: float, name: str = "Mono") -> "SimpleFontModel":
        """A font in which every code has the same advance."""
        return cls(name=name, default_width=width)

    def decode(self, data: bytes) -> List[int]:
        return list(data)

    def advance(self, code: int) -> float:
        if code in self.widths:
            return float(self.widths[code])
        if self.default_width:
            return float(self.default_width)
        raise GlyphNotFound(code)

    def to_unicode(self, code: int) -> Optional[str]:
        return chr(code)

    def is_multibyte(self) -> bool:
        return False

    def __repr__(self):
        return f"SimpleFontModel({self.name!r})"


class PdfMinerFont:
    """Adapts a pdfminer ``PDFFont`` to :class:`FontModel`."""

    def __init__(self, font: Any, name: str = ""):
        self._font = font
        self.name = str(getattr(font, "basefont", None) or name)
        matrix = getattr(font, "matrix", None)
        try:
            self.font_matrix = to_matrix(matrix) if matrix else DEFAULT_FONT_MATRIX
        except ValueError:
            self.font_matrix = DEFAULT_FONT_MATRIX

    def decode(self, data: bytes) -> List[int]:
        return list(self._font.decode(data))

    def advance(self, code: int) -> float:
        widths = self._font.widths
        if code in widths:
            return float(widths[code])
        # Standard 14 metrics are keyed by character rather than code
        text = self.to_unicode(code)
        if text is not None and text in widths:
            return float(widths[text])
        default = float(self._font.default_width or 0.0)
        if default:
            return default
        raise GlyphNotFound(code)

    def to_unicode(self, code: int) -> Optional[str]:
        try:
            return self._font.to_unichr(code)
        except (PDFUnicodeNotDefined, KeyError, IndexError):
            return None

    def is_multibyte(self) -> bool:
        return bool(self._font.is_multibyte())

    def __repr__(self):
        return f"PdfMinerFont({self.name!r})"


def _font_cache_key(font_dict: Any) -> Optional[Tuple[int, int]]:
    try:
        if font_dict.is_indirect:
            return font_dict.objgen
    except AttributeError:
        pass
    return None


class PdfMinerFontLoader:
    """Loads fonts through pdfminer's ``PDFResourceManager``.

    Fonts that are indirect objects are cached by object id, so a font shared
    between a page and its form XObjects is only parsed once.
    """

    def __init__(self):
        self._rsrcmgr = PDFResourceManager()
        self._cache: Dict[Tuple[int, int], PdfMinerFont] = {}

    def load(self, name: str, font_dict: Any) -> FontModel:
        if font_dict is None:
            raise ResourceMissing("Font", name)
        key = _font_cache_key(font_dict)
        if key is not None and key in self._cache:
            return self._cache[key]

        spec = to_pdfminer(font_dict)
        if not isinstance(spec, dict):
            raise ResourceMissing("Font", name, "not a font dictionary")
        try:
            font = self._rsrcmgr.get_font(None, spec)
        except (PSException,) + CONVERSION_ERRORS as e:
            raise ResourceMissing("Font", name, f"could not be loaded ({e})") from e

        model = PdfMinerFont(font, name)
        logger.debug("Loaded font %s as %r", name, model)
        if key is not None:
            self._cache[key] = model
        return model


class MappingFontLoader:
    """Serves fonts from a fixed mapping of resource name to model.

    Names may be given with or without the leading slash.
    """

    def __init__(self, fonts: Mapping[str, FontModel]):
        self._fonts = {"/" + k.lstrip("/"): v for k, v in fonts.items()}

    def load(self, name: str, font_dict: Any) -> FontModel:
        try:
            return self._fonts[name]
        except KeyError:
            raise ResourceMissing("Font", name) from None

    def names(self) -> Iterable[str]:
        return self._fonts.keys()
