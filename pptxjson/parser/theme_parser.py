"""Extract the color and font scheme from a presentation theme part.

Parses ``<a:clrScheme>`` and ``<a:fontScheme>`` from ``ppt/theme/themeN.xml``.
Missing slots fall back to the Office defaults; only an unreadable theme part
is an error.
"""

import logging
from typing import Optional

from pptx.opc.constants import RELATIONSHIP_TYPE as RT

from pptxjson.dsl.schema import ColorScheme, FontScheme, Theme
from pptxjson.errors import ThemeParseError, XmlSyntaxError
from pptxjson.parser import colors
from pptxjson.parser.package import PptxPackage
from pptxjson.parser.units import parse_number, percentage_to_fraction
from pptxjson.parser.xml_node import XmlNode, find_child, find_node, get_attribute


logger = logging.getLogger(__name__)

DEFAULT_THEME_PATH = "/ppt/theme/theme1.xml"

# Theme color element names mapped to ColorScheme attributes
THEME_COLOR_MAP = {
    "dk1": "dk1",
    "lt1": "lt1",
    "dk2": "dk2",
    "lt2": "lt2",
    "accent1": "accent1",
    "accent2": "accent2",
    "accent3": "accent3",
    "accent4": "accent4",
    "accent5": "accent5",
    "accent6": "accent6",
    "hlink": "hyperlink",
    "folHlink": "followed_hyperlink",
}

DEFAULT_THEME_COLORS = ColorScheme().model_dump()

DEFAULT_TYPEFACE = "Arial"


class ThemeParser:
    """Extracts a Theme from a PPTX theme part."""

    def parse(self, package: PptxPackage, theme_path: Optional[str] = None) -> Theme:
        """Parse the presentation theme.

        Args:
            package: The opened package.
            theme_path: Theme part name. When omitted, the presentation part's
                theme relationship is followed, falling back to
                ``/ppt/theme/theme1.xml``.

        Returns:
            Theme with every slot populated.

        Raises:
            ThemeParseError: If the theme part is missing or malformed.
        """
        path = theme_path or self.resolve_theme_path(package)
        try:
            root = package.read_xml(path)
        except XmlSyntaxError as e:
            raise ThemeParseError(f"Theme part {path} is malformed: {e}", {"part": path}) from e
        if root is None:
            raise ThemeParseError(f"Theme part {path} not found", {"part": path})

        theme = self.parse_theme_xml(root)
        logger.debug(f"Parsed theme '{theme.name}' from {path}")
        return theme

    def resolve_theme_path(self, package: PptxPackage) -> str:
        """Find the theme part through the presentation's relationships."""
        presentation = package.presentation_part()
        theme = package.related_part(presentation, RT.THEME)
        if theme is not None:
            return str(theme)
        return DEFAULT_THEME_PATH

    def parse_theme_xml(self, root: XmlNode) -> Theme:
        """Build a Theme from an ``a:theme`` tree.

        XML structure example:
            <a:theme name="Office Theme">
                <a:themeElements>
                    <a:clrScheme name="Office">
                        <a:dk1><a:sysClr val="windowText" lastClr="000000"/></a:dk1>
                        <a:accent1><a:srgbClr val="4472C4"/></a:accent1>
                        ...
                    </a:clrScheme>
                    <a:fontScheme name="Office">
                        <a:majorFont><a:latin typeface="Calibri Light"/></a:majorFont>
                        <a:minorFont><a:latin typeface="Calibri"/></a:minorFont>
                    </a:fontScheme>
                </a:themeElements>
            </a:theme>
        """
        return Theme(
            name=get_attribute(root, "name") or "Office Theme",
            colors=self.extract_colors(find_node(root, "clrScheme")),
            fonts=self.extract_fonts(find_node(root, "fontScheme")),
        )

    def extract_colors(self, clr_scheme: Optional[XmlNode]) -> ColorScheme:
        values = dict(DEFAULT_THEME_COLORS)
        if clr_scheme is not None:
            for xml_name, attr_name in THEME_COLOR_MAP.items():
                hex_color = self._extract_color_value(find_child(clr_scheme, xml_name))
                if hex_color:
                    values[attr_name] = hex_color
        return ColorScheme(**values)

    def extract_fonts(self, font_scheme: Optional[XmlNode]) -> FontScheme:
        major = find_child(font_scheme, "majorFont")
        minor = find_child(font_scheme, "minorFont")
        return FontScheme(
            major_latin=self._typeface(major, "latin"),
            major_east_asian=self._typeface(major, "ea"),
            major_complex_script=self._typeface(major, "cs"),
            minor_latin=self._typeface(minor, "latin"),
            minor_east_asian=self._typeface(minor, "ea"),
            minor_complex_script=self._typeface(minor, "cs"),
        )

    def _typeface(self, font: Optional[XmlNode], script: str) -> str:
        return get_attribute(find_child(font, script), "typeface") or DEFAULT_TYPEFACE

    def _extract_color_value(self, color_elem: Optional[XmlNode]) -> Optional[str]:
        """Extract a hex color from a scheme slot element such as ``<a:dk1>``."""
        if color_elem is None:
            return None

        srgb = find_child(color_elem, "srgbClr")
        if srgb is not None and get_attribute(srgb, "val"):
            return colors.to_hex(f"#{get_attribute(srgb, 'val')}")

        sys_clr = find_child(color_elem, "sysClr")
        if sys_clr is not None:
            last_clr = get_attribute(sys_clr, "lastClr")
            if last_clr:
                return colors.to_hex(f"#{last_clr}")
            return colors.SYSTEM_COLORS.get(get_attribute(sys_clr, "val") or "")

        hsl = find_child(color_elem, "hslClr")
        if hsl is not None:
            r, g, b = colors.hsl_to_rgb(
                (parse_number(get_attribute(hsl, "hue")) or 0.0) / 60000.0,
                percentage_to_fraction(get_attribute(hsl, "sat")),
                percentage_to_fraction(get_attribute(hsl, "lum")),
            )
            return f"#{r:02X}{g:02X}{b:02X}"

        prst = find_child(color_elem, "prstClr")
        if prst is not None:
            return colors.PRESET_COLORS.get(get_attribute(prst, "val") or "")

        return None
