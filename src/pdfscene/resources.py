"""Named resource lookup for a page or form XObject."""
import logging
from typing import Any, Dict, Optional

import pikepdf

from .errors import FormatViolation, ResourceMissing
from .fonts import FontLoader, FontModel, PdfMinerFontLoader

logger = logging.getLogger(__name__)


def _as_name(name: Any) -> str:
    s = str(name)
    return s if s.startswith("/") else "/" + s


class ResourceSet:
    """Resolves names used by operators against a ``/Resources`` dictionary.

    Args:
        resources: A :class:`pikepdf.Dictionary` (or plain ``dict``) with the
            usual ``/Font``, ``/XObject``, ``/ColorSpace``, ``/ExtGState``,
            ``/Pattern`` and ``/Shading`` sub-dictionaries. ``None`` means
            no resources.
        font_loader: Builds font models from font dictionaries.
    """

    def __init__(self, resources: Any = None, font_loader: Optional[FontLoader] = None):
        self._resources = resources if resources is not None else {}
        self.font_loader = font_loader if font_loader is not None else PdfMinerFontLoader()
        self._fonts: Dict[str, FontModel] = {}

    @property
    def raw(self) -> Any:
        return self._resources

    def lookup(self, category: str, name: Any, required: bool = True) -> Any:
        """Return ``/Resources/<category>/<name>``.

        Raises:
            ResourceMissing: The entry is absent and ``required`` is set.
        """
        name = _as_name(name)
        try:
            table = self._resources.get(category)
            entry = table.get(name) if table is not None else None
        except (AttributeError, pikepdf.PdfError) as e:
            logger.debug("Bad %s resource dictionary: %s", category, e)
            entry = None
        if entry is None and required:
            raise ResourceMissing(category.lstrip("/"), name)
        return entry

    def font(self, name: Any) -> FontModel:
        name = _as_name(name)
        if name not in self._fonts:
            font_dict = self.lookup("/Font", name, required=False)
            self._fonts[name] = self.font_loader.load(name, font_dict)
        return self._fonts[name]

    def dictionary(self, category: str, name: Any, streams_only: bool = False) -> Any:
        """Like :meth:`lookup`, for entries that must be dictionaries.

        Raises:
            ResourceMissing: The entry is absent.
            FormatViolation: The entry is not a dictionary (or, with
                ``streams_only``, not a stream).
        """
        entry = self.lookup(category, name)
        if streams_only:
            allowed, kind = (pikepdf.Stream,), "stream"
        else:
            allowed, kind = (pikepdf.Dictionary, pikepdf.Stream, dict), "dictionary"
        if not isinstance(entry, allowed):
            raise FormatViolation(
                f"{category.lstrip('/')} resource {_as_name(name)} is not a {kind}"
            )
        return entry

    def color_space(self, name: Any) -> Any:
        return self.lookup("/ColorSpace", name)

    def xobject(self, name: Any) -> Any:
        return self.dictionary("/XObject", name, streams_only=True)

    def ext_gstate(self, name: Any) -> Any:
        return self.dictionary("/ExtGState", name)

    def pattern(self, name: Any) -> Any:
        return self.dictionary("/Pattern", name)

    def shading(self, name: Any) -> Any:
        return self.dictionary("/Shading", name)

    def child(self, resources: Any) -> "ResourceSet":
        """Resources of a nested form XObject.

        A form without its own ``/Resources`` uses its parent's.
        """
        if resources is None:
            return self
        return ResourceSet(resources, self.font_loader)

    def __repr__(self):
        return f"ResourceSet({len(self._fonts)} fonts loaded)"
