# tests/test_registry.py
import pytest

from pdfscene.errors import FormatViolation
from pdfscene.interpreter import ContentInterpreter
from pdfscene.registry import OperatorTable, Scope


def test_register_multiple_operators():
    table = OperatorTable()

    @table.register("f", "F", signature="")
    def fill(self):
        return "filled"

    assert "f" in table and "F" in table
    assert table.get("F").handler is fill
    assert table.operators == ["F", "f"]
    assert len(table) == 2


def test_validate_converts_operands():
    table = OperatorTable()

    @table.register("X", signature="niNsa")
    def handler(self, *args):
        pass

    args = table.get("X").validate([1, 2.0, "/Name", b"str", [1, 2]])

    assert args == [1.0, 2, "/Name", b"str", [1, 2]]
    assert isinstance(args[0], float)
    assert isinstance(args[1], int)


@pytest.mark.parametrize(
    "operands",
    [
        [],  # too few
        [1, 2, 3],  # too many
        ["/Name", 2],  # wrong type
        [True, 2],  # booleans are not numbers
    ],
)
def test_validate_rejects_bad_operands(operands):
    table = OperatorTable()
    table.register("m", signature="nn")(lambda self, x, y: None)

    with pytest.raises(FormatViolation):
        table.get("m").validate(operands)


def test_integer_code_rejects_fractions():
    table = OperatorTable()
    table.register("J", signature="i")(lambda self, cap: None)

    assert table.get("J").validate([2.0]) == [2]
    with pytest.raises(FormatViolation):
        table.get("J").validate([1.5])


def test_dictionary_code_accepts_name_or_dict():
    table = OperatorTable()
    table.register("BDC", signature="Nd")(lambda self, tag, props: None)
    spec = table.get("BDC")

    assert spec.validate(["/Span", "/MC0"]) == ["/Span", "/MC0"]
    assert spec.validate(["/Span", {"/MCID": 0}]) == ["/Span", {"/MCID": 0}]
    with pytest.raises(FormatViolation):
        spec.validate(["/Span", 3])


def test_object_code_passes_anything_through():
    table = OperatorTable()
    table.register("X", signature="o")(lambda self, obj: None)
    payload = object()

    assert table.get("X").validate([payload])[0] is payload
    assert table.get("X").validate([None]) == [None]


def test_variadic_signature():
    table = OperatorTable()
    table.register("scn", signature="*")(lambda self, comps: None)
    spec = table.get("scn")

    assert spec.validate([0.1, 0.2, 1]) == [((0.1, 0.2, 1.0), None)]
    assert spec.validate([0.5, "/P0"]) == [((0.5,), "/P0")]
    assert spec.validate(["/P0"]) == [((), "/P0")]
    assert spec.validate([]) == [((), None)]
    with pytest.raises(FormatViolation):
        spec.validate(["/P0", 1])


def test_variadic_must_be_last():
    with pytest.raises(ValueError):
        OperatorTable().register("X", signature="*n")


def test_interpreter_table_covers_the_operator_set():
    expected = {
        "q", "Q", "cm", "w", "J", "j", "M", "d", "ri", "i", "gs",
        "m", "l", "c", "v", "y", "h", "re",
        "S", "s", "f", "F", "f*", "B", "B*", "b", "b*", "n", "W", "W*",
        "CS", "cs", "SC", "SCN", "sc", "scn", "G", "g", "RG", "rg", "K", "k",
        "BT", "ET", "Tc", "Tw", "Tz", "TL", "Tf", "Tr", "Ts",
        "Td", "TD", "Tm", "T*", "Tj", "TJ", "'", '"',
        "Do", "sh", "BMC", "BDC", "EMC", "MP", "DP", "d0", "d1", "BX", "EX",
    }  # fmt: skip
    assert expected <= set(ContentInterpreter.OPERATORS.operators)


def test_interpreter_scopes():
    table = ContentInterpreter.OPERATORS
    assert table.get("BT").scope is Scope.PAGE
    for op in ("ET", "Td", "TD", "Tm", "T*", "Tj", "TJ", "'", '"'):
        assert table.get(op).scope is Scope.TEXT, op
    for op in ("Tf", "Tc", "q", "cm", "rg"):
        assert table.get(op).scope is Scope.ANY, op
