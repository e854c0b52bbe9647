"""
The operator table: one entry per content stream operator.

Each entry names the handler, the operand signature it expects and where in
a content stream the operator may appear. Operands are validated once,
against the signature, before the handler runs, so handlers receive plain
Python values of the right type and count.

Signature codes:

* ``n``: number, passed as ``float``
* ``i``: integer (a number with no fractional part), passed as ``int``
* ``N``: name, passed as a ``str`` with its leading slash
* ``s``: string, passed as ``bytes``
* ``a``: array, passed as a ``list``
* ``d``: dictionary, or a name referring to one
* ``o``: any object, passed unchanged
* ``*``: the remaining operands; numbers optionally followed by one name,
  passed as ``(tuple_of_floats, name_or_None)``. Must come last.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

from .errors import FormatViolation

logger = logging.getLogger(__name__)


class Scope(Enum):
    """Where an operator may appear."""

    ANY = "any"
    PAGE = "page"
    TEXT = "text"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_name(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("/")


def _convert(code: str, value: Any) -> Any:
    if code == "n" and _is_number(value):
        return float(value)
    if code == "i" and _is_number(value) and float(value).is_integer():
        return int(value)
    if code == "N" and _is_name(value):
        return value
    if code == "s" and isinstance(value, bytes):
        return value
    if code == "a" and isinstance(value, list):
        return value
    if code == "d" and (_is_name(value) or hasattr(value, "keys")):
        return value
    if code == "o":
        return value
    raise FormatViolation(f"Expected operand of type {code!r}, got {value!r}")


def _variadic(values: Sequence[Any]) -> tuple:
    values = list(values)
    name = None
    if values and _is_name(values[-1]):
        name = values.pop()
    for value in values:
        if not _is_number(value):
            raise FormatViolation(f"Expected a color component, got {value!r}")
    return tuple(float(v) for v in values), name


@dataclass(frozen=True)
class OperatorSpec:
    name: str
    handler: Callable
    signature: str = ""
    scope: Scope = Scope.ANY

    def validate(self, operands: Sequence[Any]) -> List[Any]:
        """Check ``operands`` against the signature and convert them.

        Raises:
            FormatViolation: Wrong operand count or type.
        """
        sig = self.signature
        if sig.endswith("*"):
            fixed = sig[:-1]
            if len(operands) < len(fixed):
                raise FormatViolation(
                    f"{self.name} needs at least {len(fixed)} operands, got {len(operands)}"
                )
            head = [_convert(c, v) for c, v in zip(fixed, operands)]
            return head + [_variadic(operands[len(fixed) :])]

        if len(operands) != len(sig):
            raise FormatViolation(
                f"{self.name} takes {len(sig)} operands, got {len(operands)}"
            )
        return [_convert(c, v) for c, v in zip(sig, operands)]


class OperatorTable:
    """
    Maps operator names to :class:`OperatorSpec` entries.

    Handlers are registered with a decorator, usually on the methods of an
    interpreter class:

    .. code-block:: python

        OPERATORS = OperatorTable()

        @OPERATORS.register("m", signature="nn")
        def _move_to(self, x, y):
            ...

    The handler is called with the interpreter as ``self`` followed by the
    validated operands.
    """

    def __init__(self):
        self._specs: Dict[str, OperatorSpec] = {}

    def register(self, *ops: str, signature: str = "", scope: Scope = Scope.ANY):
        """
        Decorator to register a handler for one or more operators.

        Args:
            *ops: Operator names (e.g. ``"f"``, ``"F"``).
            signature: Operand signature, see the module docstring.
            scope: Where the operators are valid.
        """
        if "*" in signature[:-1]:
            raise ValueError(f"'*' must be the last signature code: {signature!r}")

        def decorator(func: Callable):
            for op in ops:
                self._specs[op] = OperatorSpec(op, func, signature, scope)
            return func

        return decorator

    def get(self, op: str) -> Optional[OperatorSpec]:
        return self._specs.get(op)

    @property
    def operators(self) -> List[str]:
        return sorted(self._specs)

    def __contains__(self, op: str) -> bool:
        return op in self._specs

    def __iter__(self) -> Iterator[OperatorSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)
