"""Configuration for page interpretation."""
from dataclasses import dataclass, field

from .fonts import FontLoader, PdfMinerFontLoader


@dataclass
class ProcessingOptions:
    """Configuration options for interpreting content streams."""

    max_xobject_depth: int = 32
    """Maximum nesting of Form XObjects. A ``Do`` that would go deeper is
    skipped with a ``RecursionLimitExceeded`` diagnostic. Defaults to 32.

    """

    recurse_xobjects: bool = True
    """If True, Form XObjects invoked with ``Do`` are interpreted in place.
    If False they are skipped with an ``UnsupportedOperator`` diagnostic.
    Defaults to True.

    """

    emit_clip_commands: bool = True
    """If True, a ``ClipIntersect`` command is added to the scene each time
    ``W``/``W*`` installs a clip. Every command carries its clip either way.
    Defaults to True.

    """

    apply_page_transform: bool = False
    """If True, the initial CTM maps the page's MediaBox, rotated by
    ``/Rotate``, to a space with its origin at the lower-left corner, and
    the scene's ``rotate`` is reported as 0. If False the scene is in
    default user space and the rotation is left to the consumer.
    Defaults to False.

    """

    font_loader: FontLoader = field(default_factory=PdfMinerFontLoader)
    """Builds font models from font dictionaries. Defaults to a
    :class:`~pdfscene.fonts.PdfMinerFontLoader`; use a
    :class:`~pdfscene.fonts.MappingFontLoader` to supply fixed metrics.

    """

    pattern_fallback_gray: float = 0.5
    """Gray level used for pattern colors and shadings that have no
    derivable flat color. Defaults to 0.5.

    """
