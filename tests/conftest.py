# tests/conftest.py

import pikepdf
import pytest

from pdfscene import ProcessingOptions
from pdfscene.content import parse_operations
from pdfscene.fonts import MappingFontLoader, SimpleFontModel
from pdfscene.interpreter import ContentInterpreter
from pdfscene.resources import ResourceSet


def pytest_addoption(parser):
    """Add a custom CLI flag to run visual smoke tests."""
    parser.addoption(
        "--visual",
        action="store_true",
        default=False,
        help="Run visual smoke tests (writes SVG files to smoke_outputs/)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip tests marked 'visual' unless the --visual flag is passed."""
    if config.getoption("--visual"):
        # If flag is present, run everything
        return

    skip_visual = pytest.mark.skip(reason="need --visual option to run")
    for item in items:
        if "visual" in item.keywords:
            item.add_marker(skip_visual)


##########
# FIXTURES
##########


@pytest.fixture
def create_pdf():
    """Factory fixture to create a simple 1-page PDF with specific content instructions."""

    def _make(content_stream_bytes: bytes, resources=None, page_size=(100, 100)):
        pdf = pikepdf.new()
        # Create a page
        page = pdf.add_blank_page(page_size=page_size)
        # Inject the raw content stream
        page.Contents = pdf.make_stream(content_stream_bytes)
        if resources is not None:
            page.Resources = resources
        return pdf

    return _make


@pytest.fixture
def mono_font():
    """A font in which every glyph is 500 units wide."""
    return SimpleFontModel.monospace(500, name="Mono")


@pytest.fixture
def mono_options(mono_font):
    """Options serving ``/F1`` as the 500-unit monospace font."""
    return ProcessingOptions(font_loader=MappingFontLoader({"F1": mono_font}))


@pytest.fixture
def run_stream(mono_options):
    """
    Returns a function that interprets content stream bytes and hands back
    the interpreter, so tests can inspect the final state as well as the scene.

    Usage:
        interp = run_stream(b"0 0 10 10 re f")
        interp.scene.commands
    """

    def _run(data: bytes, resources=None, options=None):
        options = options or mono_options
        interp = ContentInterpreter(
            ResourceSet(resources, options.font_loader), options=options
        )
        interp.run(parse_operations(data))
        return interp

    return _run
