#!/usr/bin/env python
"""
Print the draw commands and diagnostics of one page.

Usage: dump_commands.py input.pdf [page_number]

Page numbers start at 1.
"""
import sys
from collections import Counter

import pikepdf

import pdfscene
from pdfscene.scene import (
    ClipIntersect,
    FillAndStrokePath,
    FillPath,
    PaintGlyph,
    PaintImage,
    StrokePath,
)


def describe(command) -> str:
    """One line summary of a draw command."""
    if isinstance(command, PaintGlyph):
        x, y = command.origin
        return (
            f"glyph {command.text!r} {command.font_name} {command.fontsize:g}pt "
            f"at ({x:.1f}, {y:.1f})"
        )
    if isinstance(command, PaintImage):
        kind = "inline image" if command.inline else f"image {command.name}"
        return f"{kind} {command.width}x{command.height}"

    box = command.path.bounds()
    where = "[" + ", ".join(f"{v:.1f}" for v in box) + "]" if box else "[]"
    if isinstance(command, FillPath):
        return f"fill {command.paint.hex} {command.rule.value} {where}"
    if isinstance(command, StrokePath):
        return f"stroke {command.paint.hex} w={command.style.device_width:.2f} {where}"
    if isinstance(command, FillAndStrokePath):
        return f"fill+stroke {command.fill.hex}/{command.stroke.hex} {where}"
    if isinstance(command, ClipIntersect):
        return f"clip {command.rule.value} {where}"
    return repr(command)


def main():
    if len(sys.argv) < 2:
        print(f"Usage: {sys.argv[0]} input.pdf [page_number]")
        sys.exit(1)

    page_number = int(sys.argv[2]) if len(sys.argv) > 2 else 1

    with pikepdf.open(sys.argv[1]) as pdf:
        result = pdfscene.interpret_page(pdf.pages[page_number - 1])

    scene = result.scene
    print(f"Page {page_number}: view box {scene.view_box}, rotate {scene.rotate}")
    for command in scene:
        depth = len(command.clip)
        print("  " * depth + describe(command))

    if result.diagnostics:
        print("\nDiagnostics:")
        counts = Counter(d.kind.value for d in result.diagnostics)
        for kind, count in counts.most_common():
            print(f"  {kind}: {count}")


if __name__ == "__main__":
    main()
