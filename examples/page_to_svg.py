#!/usr/bin/env python
"""
Render every page of a PDF to an SVG file.

Usage: page_to_svg.py input.pdf output_dir [--rotate]

Glyphs are written as SVG text in a generic font and images as grey
placeholders, so the result shows layout and vector art rather than a
faithful rendering.
"""
import logging
import sys
from pathlib import Path

import pikepdf

import pdfscene


def main():
    if len(sys.argv) < 3:
        print(f"Usage: {sys.argv[0]} input.pdf output_dir [--rotate]")
        sys.exit(1)

    logging.basicConfig(level=logging.ERROR)
    out_dir = Path(sys.argv[2])
    out_dir.mkdir(parents=True, exist_ok=True)
    options = pdfscene.ProcessingOptions(apply_page_transform="--rotate" in sys.argv[3:])

    with pikepdf.open(sys.argv[1]) as pdf:
        results = pdfscene.process(pdf, options=options)

    for number, result in enumerate(results, start=1):
        if result.error is not None:
            print(f"Page {number}: skipped ({result.error})")
            continue
        target = out_dir / f"page_{number:03d}.svg"
        pdfscene.write_svg(result.scene, target)
        print(
            f"Page {number}: {len(result.scene)} commands, "
            f"{len(result.diagnostics)} diagnostics -> {target}"
        )


if __name__ == "__main__":
    main()
