"""Extract paragraphs and runs from ``p:txBody`` and render editor HTML.

Run properties are resolved through the inheritance chain a slide can
express locally: the run's own ``a:rPr``, then the body's list-style level
defaults (``a:lstStyle/a:lvlNpPr/a:defRPr``), then the shape style's
``a:fontRef``. Master and layout placeholders are not consulted.
"""

import html
from typing import Optional

from pptxjson.dsl.schema import Paragraph, Relationship, TextRun, Theme
from pptxjson.parser.fill_extractor import FillExtractor
from pptxjson.parser.units import parse_int, parse_number, percentage_to_fraction
from pptxjson.parser.xml_node import XmlNode, find_child, find_children, find_nodes, get_attribute


ALIGNMENT_MAP = {
    "l": "left",
    "ctr": "center",
    "r": "right",
    "just": "justify",
    "dist": "justify",
    "thaiDist": "justify",
}

ANCHOR_MAP = {
    "t": "top",
    "ctr": "middle",
    "b": "bottom",
}

VERTICAL_TEXT = {"vert", "vert270", "eaVert", "wordArtVert", "wordArtVertRtl", "mongolianVert"}

# Theme font placeholders usable as a typeface
THEME_FONT_REFS = {
    "+mj-lt": "major_latin",
    "+mj-ea": "major_east_asian",
    "+mj-cs": "major_complex_script",
    "+mn-lt": "minor_latin",
    "+mn-ea": "minor_east_asian",
    "+mn-cs": "minor_complex_script",
}


def _flag(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    return value in ("1", "true")


def has_text(tx_body: Optional[XmlNode]) -> bool:
    """True when the body contains at least one non-blank text node."""
    return any(node.text.strip() for node in find_nodes(tx_body, "t"))


class TextExtractor:
    """Extracts text content and formatting from a shape's text body."""

    def __init__(self, fill_extractor: Optional[FillExtractor] = None):
        self.fill_extractor = fill_extractor or FillExtractor()

    def extract_paragraphs(
        self,
        tx_body: Optional[XmlNode],
        theme: Optional[Theme] = None,
        style: Optional[XmlNode] = None,
        relationships: Optional[dict[str, Relationship]] = None,
    ) -> list[Paragraph]:
        """Extract all paragraphs from a text body.

        Args:
            tx_body: The ``p:txBody`` node.
            theme: Theme for scheme colors and theme font references.
            style: The shape's ``p:style`` node (``fontRef`` defaults).
            relationships: Slide relationships, for hyperlink targets.

        Returns:
            Paragraphs in document order.
        """
        if tx_body is None:
            return []

        lst_style = find_child(tx_body, "lstStyle")
        font_ref = find_child(style, "fontRef")
        paragraphs = []

        for p in find_children(tx_body, "p"):
            p_pr = find_child(p, "pPr")
            level = min(8, max(0, parse_int(get_attribute(p_pr, "lvl"), 0)))
            defaults = [
                node
                for node in (
                    find_child(p_pr, "defRPr"),
                    find_child(find_child(lst_style, f"lvl{level + 1}pPr"), "defRPr"),
                )
                if node is not None
            ]

            runs = []
            for child in p.children:
                tag = child.local_name
                if tag in ("r", "fld"):
                    text_node = find_child(child, "t")
                    text = text_node.text if text_node is not None else ""
                    runs.append(
                        self._extract_run(
                            text, find_child(child, "rPr"), defaults, font_ref, theme, relationships
                        )
                    )
                elif tag == "br":
                    runs.append(
                        self._extract_run(
                            "\n", find_child(child, "rPr"), defaults, font_ref, theme, relationships
                        )
                    )

            paragraphs.append(
                Paragraph(
                    runs=runs,
                    alignment=ALIGNMENT_MAP.get(get_attribute(p_pr, "algn") or "l", "left"),
                    level=level,
                    line_spacing=self._line_spacing(p_pr),
                    bullet=self._bullet(p_pr),
                )
            )

        return paragraphs

    def extract_body_properties(self, tx_body: Optional[XmlNode]) -> dict:
        """Vertical alignment and orientation from ``a:bodyPr``."""
        body_pr = find_child(tx_body, "bodyPr")
        return {
            "vertical_align": ANCHOR_MAP.get(get_attribute(body_pr, "anchor") or "t", "top"),
            "vertical": (get_attribute(body_pr, "vert") or "horz") in VERTICAL_TEXT,
        }

    def _extract_run(
        self,
        text: str,
        r_pr: Optional[XmlNode],
        defaults: list[XmlNode],
        font_ref: Optional[XmlNode],
        theme: Optional[Theme],
        relationships: Optional[dict[str, Relationship]],
    ) -> TextRun:
        layers = [node for node in (r_pr, *defaults) if node is not None]

        def attr(name: str) -> Optional[str]:
            for layer in layers:
                value = get_attribute(layer, name)
                if value is not None:
                    return value
            return None

        size = parse_number(attr("sz"))
        underline = attr("u")
        strike = attr("strike")
        baseline = parse_number(attr("baseline")) or 0

        return TextRun(
            text=text,
            font_size=round(size / 100, 2) if size else None,
            font_family=self._font_family(layers, font_ref, theme),
            color=self._color(layers, font_ref, theme),
            bold=bool(_flag(attr("b"))),
            italic=bool(_flag(attr("i"))),
            underline=underline is not None and underline != "none",
            strike=strike is not None and strike != "noStrike",
            baseline="superscript" if baseline > 0 else "subscript" if baseline < 0 else None,
            hyperlink=self._hyperlink(r_pr, relationships),
        )

    def _color(
        self,
        layers: list[XmlNode],
        font_ref: Optional[XmlNode],
        theme: Optional[Theme],
    ) -> Optional[str]:
        for layer in layers:
            solid = find_child(layer, "solidFill")
            if solid is not None:
                color = self.fill_extractor.get_solid_fill(solid, theme)
                if color:
                    return color
        if font_ref is not None:
            return self.fill_extractor.get_solid_fill(font_ref, theme) or None
        return None

    def _font_family(
        self,
        layers: list[XmlNode],
        font_ref: Optional[XmlNode],
        theme: Optional[Theme],
    ) -> Optional[str]:
        for layer in layers:
            for script in ("latin", "ea", "cs"):
                typeface = get_attribute(find_child(layer, script), "typeface")
                if typeface:
                    return self._resolve_typeface(typeface, theme)
        ref = get_attribute(font_ref, "idx")
        if ref in ("major", "minor") and theme is not None:
            return getattr(theme.fonts, f"{ref}_latin")
        return None

    def _resolve_typeface(self, typeface: str, theme: Optional[Theme]) -> Optional[str]:
        slot = THEME_FONT_REFS.get(typeface)
        if slot is None:
            return typeface
        return getattr(theme.fonts, slot) if theme is not None else None

    def _hyperlink(
        self,
        r_pr: Optional[XmlNode],
        relationships: Optional[dict[str, Relationship]],
    ) -> Optional[str]:
        rel_id = get_attribute(find_child(r_pr, "hlinkClick"), "r:id")
        if not rel_id or not relationships:
            return None
        rel = relationships.get(rel_id)
        return rel.target if rel is not None else None

    def _line_spacing(self, p_pr: Optional[XmlNode]) -> Optional[float]:
        pct = find_child(find_child(p_pr, "lnSpc"), "spcPct")
        if pct is None:
            return None
        return round(percentage_to_fraction(get_attribute(pct, "val"), default=1.0), 2)

    def _bullet(self, p_pr: Optional[XmlNode]) -> Optional[str]:
        if p_pr is None or find_child(p_pr, "buNone") is not None:
            return None
        bu_char = find_child(p_pr, "buChar")
        if bu_char is not None:
            return get_attribute(bu_char, "char") or None
        if find_child(p_pr, "buAutoNum") is not None:
            return "#"
        return None

    def render_html(self, paragraphs: list[Paragraph]) -> str:
        """Render paragraphs as the editor's rich-text HTML."""
        parts = []
        for paragraph in paragraphs:
            spans = []
            if paragraph.bullet:
                spans.append(f"<span>{html.escape(paragraph.bullet)} </span>")
            for run in paragraph.runs:
                if run.text == "\n":
                    spans.append("<br>")
                    continue
                spans.append(self._render_run(run))
            parts.append(f'<p style="text-align:{paragraph.alignment};">{"".join(spans)}</p>')
        return f"<div>{''.join(parts)}</div>"

    def _render_run(self, run: TextRun) -> str:
        styles = []
        if run.font_size:
            styles.append(f"font-size:{run.font_size:g}pt")
        if run.color:
            styles.append(f"color:{run.color}")
        if run.font_family:
            styles.append(f"font-family:'{html.escape(run.font_family)}'")
        if run.bold:
            styles.append("font-weight:bold")
        if run.italic:
            styles.append("font-style:italic")
        decorations = [name for flag, name in ((run.underline, "underline"), (run.strike, "line-through")) if flag]
        if decorations:
            styles.append(f"text-decoration:{' '.join(decorations)}")
        if run.baseline:
            styles.append(f"vertical-align:{'super' if run.baseline == 'superscript' else 'sub'}")

        style_attr = f' style="{";".join(styles)};"' if styles else ""
        content = html.escape(run.text)
        if run.hyperlink:
            content = f'<a href="{html.escape(run.hyperlink)}">{content}</a>'
        return f"<span{style_attr}>{content}</span>"
