"""End-to-end tests for PresentationParser."""

import io
import logging
import zipfile

import pytest

from pptxjson import ParserOptions, create_parser, parse_presentation, to_json
from pptxjson.errors import PackageError, ThemeParseError
from pptxjson.parser.presentation_parser import PresentationParser
from pptxjson.tests.helpers import PptxBuilder, picture_xml, shape_xml, slide_xml


class TestPresentationParser:
    """Tests for whole-package decoding."""

    def test_red_shape_with_text(self, builder: PptxBuilder):
        builder.add_slide(slide_xml(shape_xml("2", fill="FF0000", text="Hello")))

        result = parse_presentation(builder.build())

        (slide,) = result.presentation.slides
        assert [element.id for element in slide.elements] == ["2", "2_text"]
        assert slide.elements[0].fill == "rgba(255,0,0,1)"
        assert result.warnings == []
        assert result.success

    def test_slide_size_in_points(self, builder: PptxBuilder):
        result = parse_presentation(builder.build())

        assert (result.presentation.width, result.presentation.height) == (960, 540)

    def test_custom_slide_size(self):
        builder = PptxBuilder(width=9144000, height=6858000)

        result = parse_presentation(builder.build())

        assert result.presentation.width == 720

    def test_slides_follow_part_number_order(self, builder: PptxBuilder):
        builder.add_slide(slide_xml(shape_xml("100")), number=10)
        builder.add_slide(slide_xml(shape_xml("20")), number=2)
        builder.add_slide(slide_xml(shape_xml("1")), number=1)

        result = parse_presentation(builder.build())

        slides = result.presentation.slides
        assert [slide.id for slide in slides] == ["1", "2", "10"]
        assert [slide.number for slide in slides] == [1, 2, 3]

    def test_ids_unique_across_slides(self, builder: PptxBuilder):
        builder.add_slide(slide_xml(shape_xml("2")))
        builder.add_slide(slide_xml(shape_xml("2")))

        result = parse_presentation(builder.build())

        ids = [element.id for slide in result.presentation.slides for element in slide.elements]
        assert ids == ["2", "2-2"]

    def test_hidden_slide_skipped_by_default(self, builder: PptxBuilder):
        builder.add_slide(slide_xml(shape_xml("2")))
        builder.add_slide(slide_xml(shape_xml("3"), show="0"))

        result = parse_presentation(builder.build())

        assert len(result.presentation.slides) == 1
        (warning,) = result.warnings
        assert (warning.level, warning.slide_number) == ("info", 2)
        assert result.success

    def test_hidden_slide_kept_when_requested(self, builder: PptxBuilder):
        builder.add_slide(slide_xml(shape_xml("3"), show="0"))

        result = parse_presentation(builder.build(), ParserOptions(include_hidden_slides=True))

        assert result.presentation.slides[0].hidden is True
        assert result.warnings == []

    def test_bad_slide_is_isolated(self, builder: PptxBuilder, caplog):
        builder.add_slide(slide_xml(shape_xml("2")))
        builder.add_slide("<p:sld")
        builder.add_slide(slide_xml(shape_xml("4")))

        with caplog.at_level(logging.WARNING, logger="pptxjson.parser.presentation_parser"):
            result = parse_presentation(builder.build())

        assert [slide.id for slide in result.presentation.slides] == ["1", "3"]
        (warning,) = result.warnings
        assert warning.level == "error"
        assert warning.slide_number == 2
        assert result.success is False
        assert any("Slide 2" in record.getMessage() for record in caplog.records)

    def test_node_warnings_carry_slide_number(self, builder: PptxBuilder):
        builder.add_slide(slide_xml())
        builder.add_slide(slide_xml(picture_xml("8", embed=None)))

        result = parse_presentation(builder.build())

        (warning,) = result.warnings
        assert (warning.slide_number, warning.element_id) == (2, "8")
        assert result.success

    def test_non_zip_input(self):
        with pytest.raises(PackageError):
            parse_presentation(b"PK but not really")

    def test_missing_presentation_part(self, builder: PptxBuilder):
        buffer = io.BytesIO()
        with zipfile.ZipFile(io.BytesIO(builder.build())) as source, zipfile.ZipFile(buffer, "w") as target:
            for info in source.infolist():
                if info.filename != "ppt/presentation.xml":
                    target.writestr(info, source.read(info))

        with pytest.raises(PackageError):
            parse_presentation(buffer.getvalue())

    def test_declared_but_missing_theme(self, builder: PptxBuilder):
        builder.theme = None

        with pytest.raises(ThemeParseError):
            parse_presentation(builder.build())

    def test_no_theme_declared(self, builder: PptxBuilder):
        builder.theme = None
        builder.declare_theme = False

        result = parse_presentation(builder.build())

        assert result.presentation.theme is None

    def test_theme_relationship_to_missing_part(self, builder: PptxBuilder):
        builder.theme_target = "theme/theme9.xml"

        with pytest.raises(ThemeParseError):
            parse_presentation(builder.build())

    def test_theme_is_used_for_fonts(self, builder: PptxBuilder):
        result = parse_presentation(builder.build())

        assert result.presentation.theme.fonts.major_latin == "Calibri Light"

    def test_metadata(self, builder: PptxBuilder):
        result = parse_presentation(builder.build())

        metadata = result.presentation.metadata
        assert metadata.title == "Quarterly Review"
        assert metadata.author == "Ada Analyst"
        assert metadata.created.startswith("2024-01-02")

    def test_missing_core_properties(self, builder: PptxBuilder):
        builder.title = None

        result = parse_presentation(builder.build())

        assert result.presentation.metadata.title is None
        assert result.warnings == []

    def test_stats(self, builder: PptxBuilder, png):
        target = builder.add_media("image1.png", png)
        builder.add_slide(
            slide_xml(shape_xml("2", text="Hi"), picture_xml("3")),
            images={"rId2": target},
        )

        result = parse_presentation(builder.build())

        assert result.stats.total_slides == 1
        assert result.stats.total_elements == 3
        assert result.stats.element_counts == {"shape": 1, "text": 1, "image": 1}
        assert result.stats.file_size_bytes > 0
        assert result.summary()["elements"] == 3

    def test_read_from_path_and_file(self, builder: PptxBuilder, tmp_path):
        builder.add_slide(slide_xml(shape_xml("2")))
        data = builder.build()
        path = tmp_path / "deck.pptx"
        path.write_bytes(data)

        parser = create_parser()

        assert len(parser.read(path).presentation.slides) == 1
        assert len(parser.read(str(path)).presentation.slides) == 1
        assert len(parser.read(io.BytesIO(data)).presentation.slides) == 1

    def test_parse_is_deterministic(self, builder: PptxBuilder):
        builder.add_slide(slide_xml(shape_xml("2", text="Hello"), shape_xml("2")))
        data = builder.build()
        parser = create_parser()

        first = parser.parse(data)
        second = parser.parse(data)

        assert first.presentation == second.presentation
        assert to_json(first) == to_json(second)

    def test_create_parser_builds_independent_engines(self):
        first = create_parser(ParserOptions(image_workers=5))
        second = create_parser()

        assert isinstance(first, PresentationParser)
        assert first.slide_parser is not second.slide_parser
        assert first.slide_parser.image_service.max_workers == 5
        assert second.slide_parser.image_service.max_workers == 3
