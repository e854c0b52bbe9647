# tests/test_interpreter.py
import logging

import pikepdf
import pytest

from pdfscene import ProcessingOptions
from pdfscene.clip import FillRule
from pdfscene.errors import DiagnosticKind
from pdfscene.fonts import MappingFontLoader, SimpleFontModel
from pdfscene.interpreter import ContentInterpreter
from pdfscene.scene import (
    ClipIntersect,
    FillAndStrokePath,
    FillPath,
    PaintGlyph,
    PaintImage,
    StrokePath,
)
from pdfscene.state import GraphicsState

# --- Graphics state and paths ---


def test_filled_square_end_to_end(run_stream):
    interp = run_stream(b"q 1 0 0 1 10 10 cm 0 0 1 rg 0 0 100 100 re f Q")
    commands = interp.scene.commands

    assert len(commands) == 1
    fill = commands[0]
    assert isinstance(fill, FillPath)
    assert fill.path.subpaths[0].points() == [(10, 10), (110, 10), (110, 110), (10, 110)]
    assert fill.paint.rgba8 == (0, 0, 255, 255)
    assert fill.rule is FillRule.NONZERO
    assert fill.clip.is_unbounded
    assert interp.state == GraphicsState()
    assert len(interp.diagnostics) == 0


def test_lone_restore_underflows(run_stream):
    interp = run_stream(b"Q")

    assert len(interp.scene) == 0
    assert interp.diagnostics.count(DiagnosticKind.STATE_UNDERFLOW) == 1
    assert interp.state is interp.stack.initial


def test_balanced_save_restore_restores_state(run_stream):
    data = (
        b"q 2 w 1 J 2 j 5 M [3 1] 0 d 0.5 0 0 0.5 0 0 cm 1 0 0 RG 0.2 g "
        b"/F1 12 Tf 2 Tc 3 Tw 80 Tz 14 TL 5 Ts 1 Tr Q"
    )
    interp = run_stream(data)

    assert interp.state == GraphicsState()
    assert len(interp.diagnostics) == 0


def test_state_operators_update_state(run_stream):
    interp = run_stream(b"3 w 1 J 2 j 4 M [2 1] 1 d /Perceptual ri 50 i")
    gs = interp.state

    assert gs.line_width == 3
    assert (gs.line_cap, gs.line_join) == (1, 2)
    assert gs.miter_limit == 4
    assert gs.dash.array == (2, 1)
    assert gs.dash.phase == 1
    assert gs.rendering_intent == "/Perceptual"
    assert gs.flatness == 50


def test_bad_dash_array_is_format_violation(run_stream):
    interp = run_stream(b"[-1 2] 0 d")
    assert interp.diagnostics.count(DiagnosticKind.FORMAT_VIOLATION) == 1
    assert interp.state.dash.is_solid


def test_wrong_operand_count_skips_operator(run_stream):
    interp = run_stream(b"0 0 100 re f 0 0 m 5 l 1 0 0 rg")

    assert len(interp.scene) == 0
    assert interp.diagnostics.count(DiagnosticKind.FORMAT_VIOLATION) == 2
    assert interp.state.fill_paint.rgba8 == (255, 0, 0, 255)


def test_unknown_operator_is_recorded(run_stream, caplog):
    with caplog.at_level(logging.DEBUG, logger="pdfscene"):
        interp = run_stream(b"1 2 Xyz 0 0 10 10 re f")

    assert len(interp.scene) == 1
    diags = interp.diagnostics.of_kind(DiagnosticKind.UNSUPPORTED_OPERATOR)
    assert len(diags) == 1
    assert diags[0].operator == "Xyz"


def test_unknown_operator_inside_compatibility_section(run_stream):
    interp = run_stream(b"BX 1 Xyz EX 0 0 10 10 re f")
    assert len(interp.diagnostics) == 0
    assert len(interp.scene) == 1


def test_stroke_commands_carry_style(run_stream):
    interp = run_stream(b"2 0 0 2 0 0 cm 3 w 0 1 0 RG 0 0 m 10 0 l S")
    (stroke,) = interp.scene.commands

    assert isinstance(stroke, StrokePath)
    assert stroke.paint.rgba8 == (0, 255, 0, 255)
    assert stroke.style.width == 3
    assert stroke.style.device_width == pytest.approx(6)
    assert stroke.path.subpaths[0].points() == [(0, 0), (20, 0)]


def test_close_stroke_closes_path(run_stream):
    interp = run_stream(b"0 0 m 10 0 l 10 10 l s")
    (stroke,) = interp.scene.commands
    assert stroke.path.subpaths[0].closed


@pytest.mark.parametrize(
    "op, rule, closed",
    [
        (b"B", FillRule.NONZERO, False),
        (b"B*", FillRule.EVEN_ODD, False),
        (b"b", FillRule.NONZERO, True),
        (b"b*", FillRule.EVEN_ODD, True),
    ],
)
def test_fill_and_stroke_operators(run_stream, op, rule, closed):
    interp = run_stream(b"1 0 0 rg 0 0 1 RG 0 0 m 10 0 l 10 10 l " + op)
    (cmd,) = interp.scene.commands

    assert isinstance(cmd, FillAndStrokePath)
    assert cmd.rule is rule
    assert cmd.path.subpaths[0].closed is closed
    assert cmd.fill.rgba8 == (255, 0, 0, 255)
    assert cmd.stroke.rgba8 == (0, 0, 255, 255)


def test_fill_even_odd(run_stream):
    interp = run_stream(b"0 0 10 10 re f*")
    assert interp.scene.commands[0].rule is FillRule.EVEN_ODD


def test_empty_path_paints_nothing(run_stream):
    interp = run_stream(b"f S B 0 0 m n")
    assert len(interp.scene) == 0
    assert len(interp.diagnostics) == 0


def test_painting_clears_path(run_stream):
    interp = run_stream(b"0 0 10 10 re f S")
    assert len(interp.scene) == 1
    assert interp.path.is_empty


# --- Clipping ---


def test_clip_applies_after_paint(run_stream):
    interp = run_stream(b"0 0 50 50 re W f 0 0 100 100 re f")
    first, clip, second = interp.scene.commands

    assert isinstance(first, FillPath)
    assert first.clip.is_unbounded
    assert isinstance(clip, ClipIntersect)
    assert clip.rule is FillRule.NONZERO
    assert clip.clip.bounds() == (0, 0, 50, 50)
    assert second.clip == clip.clip


def test_clip_with_end_path(run_stream):
    interp = run_stream(b"10 10 20 20 re W* n 0 0 100 100 re f")
    clip, fill = interp.scene.commands

    assert isinstance(clip, ClipIntersect)
    assert clip.rule is FillRule.EVEN_ODD
    assert fill.clip.bounds() == (10, 10, 30, 30)


def test_clip_is_restored_by_q(run_stream):
    interp = run_stream(b"q 0 0 5 5 re W n Q 0 0 10 10 re f")
    fill = interp.scene.commands[-1]
    assert fill.clip.is_unbounded


def test_clip_on_empty_path_clips_everything(run_stream):
    interp = run_stream(b"W n 0 0 10 10 re f")
    fill = interp.scene.commands[-1]
    assert not fill.clip.is_unbounded
    assert not fill.clip.contains(5, 5)


def test_clip_commands_can_be_suppressed(run_stream, mono_font):
    options = ProcessingOptions(
        emit_clip_commands=False, font_loader=MappingFontLoader({"F1": mono_font})
    )
    interp = run_stream(b"0 0 5 5 re W n 0 0 10 10 re f", options=options)

    (fill,) = interp.scene.commands
    assert fill.clip.bounds() == (0, 0, 5, 5)


def test_clips_accumulate(run_stream):
    interp = run_stream(b"0 0 50 50 re W n 25 25 50 50 re W n 0 0 100 100 re f")
    fill = interp.scene.commands[-1]

    assert len(fill.clip) == 2
    assert fill.clip.bounds() == (25, 25, 50, 50)


# --- Color ---


def test_cmyk_fill(run_stream):
    interp = run_stream(b"1 0 0 0 k 0 0 1 1 re f 0 0 0 1 k 0 0 1 1 re f")
    cyan, black = interp.scene.commands
    assert cyan.paint.rgba8 == (0, 255, 255, 255)
    assert black.paint.rgba8 == (0, 0, 0, 255)


def test_color_space_selection_sets_initial_color(run_stream):
    interp = run_stream(b"1 0 0 rg /DeviceCMYK cs")
    gs = interp.state
    assert gs.fill_components == (0.0, 0.0, 0.0, 1.0)
    assert gs.fill_paint.rgba8 == (0, 0, 0, 255)


def test_sc_in_current_space(run_stream):
    interp = run_stream(b"/DeviceRGB CS 0 1 0 SC /DeviceGray cs 1 sc")
    gs = interp.state
    assert gs.stroke_paint.rgba8 == (0, 255, 0, 255)
    assert gs.fill_paint.rgba8 == (255, 255, 255, 255)


def test_sc_wrong_component_count(run_stream):
    interp = run_stream(b"/DeviceRGB cs 1 sc")
    assert interp.diagnostics.count(DiagnosticKind.FORMAT_VIOLATION) == 1
    assert interp.state.fill_components == (0.0, 0.0, 0.0)


def test_scn_name_outside_pattern_space(run_stream):
    interp = run_stream(b"/P0 scn")
    assert interp.diagnostics.count(DiagnosticKind.FORMAT_VIOLATION) == 1


def test_missing_color_space_resource(run_stream):
    interp = run_stream(b"/CS9 cs")
    assert interp.diagnostics.count(DiagnosticKind.RESOURCE_MISSING) == 1


def test_indexed_out_of_range_keeps_command_count(run_stream):
    resources = pikepdf.Dictionary(
        ColorSpace=pikepdf.Dictionary(
            CS0=pikepdf.Array(
                [
                    pikepdf.Name.Indexed,
                    pikepdf.Name.DeviceRGB,
                    1,
                    pikepdf.String(b"\xff\x00\x00\x00\xff\x00"),
                ]
            )
        )
    )
    interp = run_stream(b"/CS0 cs 9 sc 0 0 10 10 re f", resources=resources)

    (fill,) = interp.scene.commands
    assert fill.paint.rgba8 == (0, 255, 0, 255)
    assert interp.diagnostics.count(DiagnosticKind.INVALID_COLOR_INDEX) == 1


def test_ext_gstate_alpha_and_line_width(run_stream):
    resources = pikepdf.Dictionary(
        ExtGState=pikepdf.Dictionary(
            GS0=pikepdf.Dictionary(
                Type=pikepdf.Name.ExtGState,
                ca=0.5,
                CA=0.25,
                LW=4,
                BM=pikepdf.Name.Multiply,
                D=pikepdf.Array([pikepdf.Array([2, 2]), 0]),
            )
        )
    )
    interp = run_stream(b"/GS0 gs 0 0 10 10 re B", resources=resources)

    (cmd,) = interp.scene.commands
    assert cmd.fill.alpha == 0.5
    assert cmd.stroke.alpha == 0.25
    assert cmd.style.width == 4
    assert cmd.style.dash.array == (2, 2)
    assert interp.state.blend_mode == "/Multiply"


def test_ext_gstate_bad_entry_is_skipped(run_stream):
    resources = pikepdf.Dictionary(
        ExtGState=pikepdf.Dictionary(
            GS0=pikepdf.Dictionary(LW=2, D=pikepdf.Name.Bogus)
        )
    )
    interp = run_stream(b"/GS0 gs", resources=resources)

    assert interp.state.line_width == 2
    assert interp.diagnostics.count(DiagnosticKind.FORMAT_VIOLATION) == 1


def test_ext_gstate_line_cap_out_of_range(run_stream):
    resources = pikepdf.Dictionary(
        ExtGState=pikepdf.Dictionary(GS0=pikepdf.Dictionary(LC=7, LJ=1))
    )
    interp = run_stream(b"/GS0 gs", resources=resources)

    assert (interp.state.line_cap, interp.state.line_join) == (0, 1)
    assert interp.diagnostics.count(DiagnosticKind.FORMAT_VIOLATION) == 1


def test_ext_gstate_missing(run_stream):
    interp = run_stream(b"/GS9 gs")
    assert interp.diagnostics.count(DiagnosticKind.RESOURCE_MISSING) == 1


# --- Text ---


def test_text_advance(run_stream):
    interp = run_stream(b"BT /F1 10 Tf 100 200 Td (abc) Tj ET")
    glyphs = interp.scene.of_type(PaintGlyph)

    assert [g.text for g in glyphs] == ["a", "b", "c"]
    assert [g.origin for g in glyphs] == [
        pytest.approx((100, 200)),
        pytest.approx((105, 200)),
        pytest.approx((110, 200)),
    ]
    assert interp.text.matrix[4] - 100 == pytest.approx(3 * 500 * 10 / 1000)
    assert glyphs[0].font_name == "Mono"
    assert glyphs[0].fontsize == 10


def test_tj_adjustments(run_stream):
    interp = run_stream(b"BT /F1 10 Tf [(a) -1000 (b) 500 (c)] TJ ET")
    xs = [g.origin[0] for g in interp.scene.of_type(PaintGlyph)]
    assert xs == pytest.approx([0, 15, 15])


def test_tj_rejects_unexpected_elements(run_stream):
    interp = run_stream(b"BT /F1 10 Tf [(a) /Oops (b)] TJ ET")
    assert len(interp.scene.of_type(PaintGlyph)) == 1
    assert interp.diagnostics.count(DiagnosticKind.FORMAT_VIOLATION) == 1


def test_quote_operators_move_to_next_line(run_stream):
    interp = run_stream(b"BT /F1 10 Tf 12 TL 0 100 Td (a) ' 5 2 (b) \" ET")
    first, second = interp.scene.of_type(PaintGlyph)

    assert first.origin == pytest.approx((0, 88))
    assert second.origin == pytest.approx((0, 76))
    assert interp.state.text.word_spacing == 5
    assert interp.state.text.char_spacing == 2


def test_td_upper_sets_leading(run_stream):
    interp = run_stream(b"BT 0 -14 TD T* ET")
    assert interp.state.text.leading == 14
    assert interp.text.line_matrix[5] == pytest.approx(-28)


def test_text_matrix_is_not_saved_by_q(run_stream):
    interp = run_stream(b"BT 10 10 Td q 5 5 Td Q ET")
    assert interp.text.matrix[4:] == pytest.approx((15, 15))


def test_text_render_modes(run_stream):
    data = (
        b"BT /F1 10 Tf 1 0 0 rg 0 0 1 RG "
        b"0 Tr (a) Tj 1 Tr (b) Tj 2 Tr (c) Tj 3 Tr (d) Tj 7 Tr (e) Tj ET"
    )
    interp = run_stream(data)
    glyphs = {g.text: g for g in interp.scene.of_type(PaintGlyph)}

    assert set(glyphs) == {"a", "b", "c"}
    assert glyphs["a"].fill.rgba8 == (255, 0, 0, 255) and glyphs["a"].stroke is None
    assert glyphs["b"].fill is None and glyphs["b"].stroke.rgba8 == (0, 0, 255, 255)
    assert glyphs["b"].style is not None
    assert glyphs["c"].fill is not None and glyphs["c"].stroke is not None


def test_invisible_text_still_advances(run_stream):
    interp = run_stream(b"BT /F1 10 Tf 3 Tr (ab) Tj 0 Tr (c) Tj ET")
    (glyph,) = interp.scene.of_type(PaintGlyph)
    assert glyph.origin[0] == pytest.approx(10)


def test_show_without_font(run_stream):
    interp = run_stream(b"BT (abc) Tj ET")
    assert len(interp.scene) == 0
    assert interp.diagnostics.count(DiagnosticKind.FORMAT_VIOLATION) == 1


def test_missing_font_recorded_once(run_stream):
    interp = run_stream(b"BT /F9 10 Tf (abc) Tj (def) Tj ET")
    assert len(interp.scene) == 0
    assert len(interp.diagnostics) == 1
    assert interp.diagnostics.records[0].kind is DiagnosticKind.RESOURCE_MISSING
    assert interp.state.text.font_name == "/F9"


def test_missing_glyph_is_not_fatal(run_stream):
    sparse = SimpleFontModel("Sparse", widths={97: 400})
    options = ProcessingOptions(font_loader=MappingFontLoader({"F1": sparse}))
    interp = run_stream(b"BT /F1 10 Tf (aza) Tj ET", options=options)

    assert len(interp.scene) == 2
    assert interp.diagnostics.count(DiagnosticKind.GLYPH_NOT_FOUND) == 1


def test_text_operators_outside_bt(run_stream):
    interp = run_stream(b"/F1 10 Tf 10 10 Td (a) Tj ET")
    assert len(interp.scene) == 0
    assert interp.diagnostics.count(DiagnosticKind.FORMAT_VIOLATION) == 3


def test_nested_bt(run_stream):
    interp = run_stream(b"BT BT ET")
    assert interp.diagnostics.count(DiagnosticKind.FORMAT_VIOLATION) == 1
    assert not interp.in_text_object


def test_text_state_operators_allowed_outside_bt(run_stream):
    interp = run_stream(b"2 Tc 3 Tw 90 Tz 12 TL 1 Ts 2 Tr")
    ts = interp.state.text
    assert (ts.char_spacing, ts.word_spacing, ts.horiz_scaling) == (2, 3, 90)
    assert (ts.leading, ts.rise, ts.render_mode) == (12, 1, 2)
    assert len(interp.diagnostics) == 0


def test_text_uses_ctm(run_stream):
    interp = run_stream(b"2 0 0 2 50 50 cm BT /F1 10 Tf (a) Tj ET")
    (glyph,) = interp.scene.of_type(PaintGlyph)
    assert glyph.origin == pytest.approx((50, 50))
    assert glyph.matrix[0] == pytest.approx(0.02)


# --- XObjects ---


def _form(pdf, content, **kwargs):
    return pdf.make_stream(
        content,
        Type=pikepdf.Name.XObject,
        Subtype=pikepdf.Name.Form,
        BBox=pikepdf.Array([0, 0, 100, 100]),
        **kwargs,
    )


def test_form_xobject_is_interpreted(run_stream):
    pdf = pikepdf.new()
    form = _form(pdf, b"0 0 10 10 re f", Matrix=pikepdf.Array([1, 0, 0, 1, 20, 30]))
    resources = pikepdf.Dictionary(XObject=pikepdf.Dictionary(Fm0=form))

    interp = run_stream(b"/Fm0 Do", resources=resources)

    (fill,) = interp.scene.commands
    assert fill.path.bounds() == (20, 30, 30, 40)
    # The form is clipped to its bounding box
    assert fill.clip.bounds() == (20, 30, 120, 130)
    assert interp.state == GraphicsState()


def test_form_cannot_restore_parent_state(run_stream):
    pdf = pikepdf.new()
    form = _form(pdf, b"Q Q 3 w q")
    resources = pikepdf.Dictionary(XObject=pikepdf.Dictionary(Fm0=form))

    interp = run_stream(b"q 2 w /Fm0 Do", resources=resources)

    assert interp.diagnostics.count(DiagnosticKind.STATE_UNDERFLOW) == 2
    assert interp.state.line_width == 2
    assert interp.stack.depth == 1


def test_form_uses_own_resources(run_stream):
    pdf = pikepdf.new()
    form = _form(
        pdf,
        b"/Inner cs 0 0 10 10 re f",
        Resources=pikepdf.Dictionary(
            ColorSpace=pikepdf.Dictionary(Inner=pikepdf.Name.DeviceRGB)
        ),
    )
    resources = pikepdf.Dictionary(XObject=pikepdf.Dictionary(Fm0=form))

    interp = run_stream(b"/Fm0 Do", resources=resources)

    assert len(interp.diagnostics) == 0
    assert len(interp.scene) == 1


def test_self_referencing_form_stops(run_stream):
    pdf = pikepdf.new()
    form = _form(pdf, b"0 0 1 1 re f /Fm0 Do")
    form.Resources = pikepdf.Dictionary(XObject=pikepdf.Dictionary(Fm0=form))
    resources = pikepdf.Dictionary(XObject=pikepdf.Dictionary(Fm0=form))

    interp = run_stream(b"/Fm0 Do", resources=resources)

    assert len(interp.scene) == 1
    diags = interp.diagnostics.of_kind(DiagnosticKind.RECURSION_LIMIT_EXCEEDED)
    assert len(diags) == 1
    assert diags[0].depth == 1


def test_depth_limit(run_stream, mono_font):
    pdf = pikepdf.new()
    inner = _form(pdf, b"0 0 1 1 re f")
    outer = _form(
        pdf,
        b"0 0 2 2 re f /Inner Do",
        Resources=pikepdf.Dictionary(XObject=pikepdf.Dictionary(Inner=inner)),
    )
    resources = pikepdf.Dictionary(XObject=pikepdf.Dictionary(Outer=outer))
    options = ProcessingOptions(
        max_xobject_depth=1, font_loader=MappingFontLoader({"F1": mono_font})
    )

    interp = run_stream(b"/Outer Do", resources=resources, options=options)

    assert len(interp.scene) == 1
    assert interp.diagnostics.count(DiagnosticKind.RECURSION_LIMIT_EXCEEDED) == 1


def test_recursion_disabled(run_stream, mono_font):
    pdf = pikepdf.new()
    form = _form(pdf, b"0 0 1 1 re f")
    resources = pikepdf.Dictionary(XObject=pikepdf.Dictionary(Fm0=form))
    options = ProcessingOptions(
        recurse_xobjects=False, font_loader=MappingFontLoader({"F1": mono_font})
    )

    interp = run_stream(b"/Fm0 Do", resources=resources, options=options)

    assert len(interp.scene) == 0
    assert interp.diagnostics.count(DiagnosticKind.UNSUPPORTED_OPERATOR) == 1


def test_image_xobject(run_stream):
    pdf = pikepdf.new()
    image = pdf.make_stream(
        b"\x00" * 4,
        Type=pikepdf.Name.XObject,
        Subtype=pikepdf.Name.Image,
        Width=2,
        Height=2,
        BitsPerComponent=8,
        ColorSpace=pikepdf.Name.DeviceGray,
    )
    resources = pikepdf.Dictionary(XObject=pikepdf.Dictionary(Im0=image))

    interp = run_stream(b"q 50 0 0 40 10 10 cm /Im0 Do Q", resources=resources)

    (img,) = interp.scene.commands
    assert isinstance(img, PaintImage)
    assert img.name == "/Im0"
    assert img.matrix == (50, 0, 0, 40, 10, 10)
    assert (img.width, img.height) == (2, 2)
    assert not img.inline


def test_missing_xobject(run_stream):
    interp = run_stream(b"/Fm9 Do 0 0 1 1 re f")
    assert len(interp.scene) == 1
    assert interp.diagnostics.count(DiagnosticKind.RESOURCE_MISSING) == 1


def test_inline_image(run_stream):
    interp = run_stream(b"q 20 0 0 20 0 0 cm BI /W 2 /H 2 /CS /G /BPC 8 ID abcd EI Q")
    (img,) = interp.scene.commands
    assert img.inline
    assert img.matrix[0] == 20


# --- Shadings and marked content ---


def test_shading_is_approximated(run_stream):
    shading = pikepdf.Dictionary(
        ShadingType=2,
        ColorSpace=pikepdf.Name.DeviceGray,
        Coords=pikepdf.Array([0, 0, 1, 0]),
        Function=pikepdf.Dictionary(
            FunctionType=2, C0=pikepdf.Array([0]), C1=pikepdf.Array([1]), N=1
        ),
    )
    resources = pikepdf.Dictionary(Shading=pikepdf.Dictionary(Sh0=shading))

    interp = run_stream(b"q 0 0 40 40 re W n /Sh0 sh Q", resources=resources)

    fill = interp.scene.of_type(FillPath)[0]
    assert fill.paint.rgba8 == (128, 128, 128, 255)
    assert fill.path.bounds() == (0, 0, 40, 40)
    assert interp.diagnostics.count(DiagnosticKind.UNSUPPORTED_OPERATOR) == 1


def test_shading_with_bad_bbox_falls_back_to_clip(run_stream):
    shading = pikepdf.Dictionary(
        ShadingType=2,
        ColorSpace=pikepdf.Name.DeviceGray,
        BBox=pikepdf.Array([0, 0, 10]),
    )
    resources = pikepdf.Dictionary(Shading=pikepdf.Dictionary(Sh0=shading))

    interp = run_stream(b"q 0 0 40 40 re W n /Sh0 sh Q", resources=resources)

    fill = interp.scene.of_type(FillPath)[0]
    assert fill.path.bounds() == (0, 0, 40, 40)
    assert interp.diagnostics.count(DiagnosticKind.FORMAT_VIOLATION) == 1


# --- Malformed resources ---

MALFORMED_RESOURCES = [
    (
        pikepdf.Dictionary(ExtGState=pikepdf.Dictionary(GS1=5)),
        b"/GS1 gs",
    ),
    (
        pikepdf.Dictionary(
            ColorSpace=pikepdf.Dictionary(CS0=pikepdf.Array([pikepdf.Name.ICCBased, 5]))
        ),
        b"/CS0 cs",
    ),
    (
        pikepdf.Dictionary(ColorSpace=pikepdf.Dictionary(CS0=pikepdf.Name("/CS0"))),
        b"/CS0 cs",
    ),
    (
        pikepdf.Dictionary(ColorSpace=pikepdf.Dictionary(CS0=7)),
        b"/CS0 CS",
    ),
    (
        pikepdf.Dictionary(XObject=pikepdf.Dictionary(X0=5)),
        b"/X0 Do",
    ),
    (
        pikepdf.Dictionary(
            XObject=pikepdf.Dictionary(
                X0=pikepdf.Dictionary(Subtype=pikepdf.Name.Form, BBox=[0, 0, 1, 1])
            )
        ),
        b"/X0 Do",
    ),
    (
        pikepdf.Dictionary(Shading=pikepdf.Dictionary(Sh0=pikepdf.Array([1, 2]))),
        b"/Sh0 sh",
    ),
    (
        pikepdf.Dictionary(Pattern=pikepdf.Dictionary(P0=3)),
        b"/Pattern cs /P0 scn",
    ),
    (
        pikepdf.Dictionary(
            Pattern=pikepdf.Dictionary(
                P0=pikepdf.Dictionary(PatternType=2, Shading=4)
            )
        ),
        b"/Pattern cs /P0 scn",
    ),
]


@pytest.mark.parametrize("resources, stream", MALFORMED_RESOURCES)
def test_malformed_resources_are_recovered(run_stream, resources, stream):
    """A bad resource entry costs one operator, never the rest of the page."""
    interp = run_stream(stream + b" 0 0 10 10 re f", resources=resources)

    assert interp.diagnostics.count(DiagnosticKind.FORMAT_VIOLATION) == 1
    assert len(interp.scene.of_type(FillPath)) == 1


def test_non_dictionary_ext_gstate_is_reported(run_stream):
    resources = pikepdf.Dictionary(ExtGState=pikepdf.Dictionary(GS1=5))
    interp = run_stream(b"/GS1 gs", resources=resources)

    (diagnostic,) = interp.diagnostics
    assert diagnostic.operator == "gs"
    assert "not a dictionary" in diagnostic.message


def test_marked_content_is_ignored(run_stream):
    interp = run_stream(
        b"/Artifact BMC EMC /Span <</MCID 0>> BDC EMC /Span /P0 BDC EMC /Tag MP"
    )
    assert len(interp.diagnostics) == 0


def test_interpreter_defaults():
    interp = ContentInterpreter()
    interp.execute("re", [0, 0, 1, 1])
    interp.execute("f", [])
    assert len(interp.scene) == 1


@pytest.mark.parametrize("data", [b"9 Tr", b"3 J", b"-1 j", b"1.5 J"])
def test_out_of_range_enumerations(run_stream, data):
    interp = run_stream(data)
    assert interp.diagnostics.count(DiagnosticKind.FORMAT_VIOLATION) == 1
    assert interp.state == GraphicsState()
