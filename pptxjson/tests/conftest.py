"""Pytest configuration and fixtures."""

import pytest

from pptxjson.config import ParserOptions
from pptxjson.dsl.schema import Relationship, Theme
from pptxjson.parser.context import IdGenerator, ProcessingContext, WarningCollector
from pptxjson.parser.diagnostics import MemoryDiagnostics
from pptxjson.parser.package import PptxPackage
from pptxjson.tests.helpers import PptxBuilder, png_bytes


@pytest.fixture
def builder() -> PptxBuilder:
    """Create an empty package builder with a theme and core properties."""
    return PptxBuilder()


@pytest.fixture
def png() -> bytes:
    """A 4x2 red PNG."""
    return png_bytes()


@pytest.fixture
def media_package(builder: PptxBuilder, png: bytes):
    """Open a package holding one slide and one PNG under /ppt/media."""
    builder.add_media("image1.png", png)
    builder.add_slide("<p:sld/>")
    package = PptxPackage(builder.build())
    yield package
    package.close()


@pytest.fixture
def make_context(media_package: PptxPackage):
    """Factory for slide contexts over ``media_package``."""

    def _make(relationships=None, **overrides) -> ProcessingContext:
        values = dict(
            package=media_package,
            slide_number=1,
            slide_id="1",
            slide_part="/ppt/slides/slide1.xml",
            theme=Theme(),
            relationships=relationships or {},
            id_generator=IdGenerator(),
            warnings=WarningCollector(),
            options=ParserOptions(),
            diagnostics=MemoryDiagnostics(),
        )
        values.update(overrides)
        return ProcessingContext(**values)

    return _make


@pytest.fixture
def image_relationship() -> Relationship:
    return Relationship(
        id="rId2",
        type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/image",
        target="../media/image1.png",
    )
