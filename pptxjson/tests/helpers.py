"""Builders for small in-memory PPTX packages used across the test suite."""

import io
import zipfile
from typing import Optional

from PIL import Image
from pptx.opc.constants import CONTENT_TYPE as CT
from pptx.opc.constants import RELATIONSHIP_TYPE as RT


NS = (
    'xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
    'xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships" '
    'xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main"'
)

RELS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"

EMU = 12700  # per point


# ============================================================================
# Shape tree fragments
# ============================================================================


def xfrm_xml(x: int = 0, y: int = 0, cx: int = 127000, cy: int = 127000, attrs: str = "") -> str:
    return f'<a:xfrm{attrs}><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></a:xfrm>'


def text_body_xml(*paragraphs: str, body_attrs: str = "", run_attrs: str = "") -> str:
    paras = "".join(
        f'<a:p><a:r><a:rPr lang="en-US"{run_attrs}/><a:t>{text}</a:t></a:r></a:p>' for text in paragraphs
    )
    return f"<p:txBody><a:bodyPr{body_attrs}/><a:lstStyle/>{paras}</p:txBody>"


def shape_xml(
    shape_id: str,
    name: str = "Shape",
    x: int = 0,
    y: int = 0,
    cx: int = 127000,
    cy: int = 127000,
    prst: str = "rect",
    fill: Optional[str] = "FF0000",
    text: Optional[str] = None,
    tx_box: bool = False,
    xfrm_attrs: str = "",
    extra_sp_pr: str = "",
) -> str:
    fill_xml = f'<a:solidFill><a:srgbClr val="{fill}"/></a:solidFill>' if fill else "<a:noFill/>"
    c_nv_sp_pr = '<p:cNvSpPr txBox="1"/>' if tx_box else "<p:cNvSpPr/>"
    body = text_body_xml(text) if text is not None else ""
    return (
        f'<p:sp><p:nvSpPr><p:cNvPr id="{shape_id}" name="{name}"/>{c_nv_sp_pr}<p:nvPr/></p:nvSpPr>'
        f"<p:spPr>{xfrm_xml(x, y, cx, cy, xfrm_attrs)}"
        f'<a:prstGeom prst="{prst}"><a:avLst/></a:prstGeom>{fill_xml}{extra_sp_pr}</p:spPr>'
        f"{body}</p:sp>"
    )


def picture_xml(
    shape_id: str, embed: Optional[str] = "rId2", src_rect: str = "", fill_rect: str = "", **geometry
) -> str:
    blip = f'<a:blip r:embed="{embed}"/>' if embed else ""
    return (
        f'<p:pic><p:nvPicPr><p:cNvPr id="{shape_id}" name="Picture {shape_id}"/><p:cNvPicPr/><p:nvPr/></p:nvPicPr>'
        f"<p:blipFill>{blip}{src_rect}<a:stretch><a:fillRect{fill_rect}/></a:stretch></p:blipFill>"
        f'<p:spPr>{xfrm_xml(**geometry)}<a:prstGeom prst="rect"><a:avLst/></a:prstGeom></p:spPr></p:pic>'
    )


def connector_xml(shape_id: str, prst: str = "straightConnector1", xfrm_attrs: str = "", ln: str = "", **geometry) -> str:
    return (
        f'<p:cxnSp><p:nvCxnSpPr><p:cNvPr id="{shape_id}" name="Connector {shape_id}"/><p:cNvCxnSpPr/><p:nvPr/></p:nvCxnSpPr>'
        f'<p:spPr>{xfrm_xml(attrs=xfrm_attrs, **geometry)}<a:prstGeom prst="{prst}"><a:avLst/></a:prstGeom>{ln}</p:spPr></p:cxnSp>'
    )


def group_xml(
    shape_id: str,
    *children: str,
    off: tuple[int, int] = (0, 0),
    ext: tuple[int, int] = (127000, 127000),
    ch_off: tuple[int, int] = (0, 0),
    ch_ext: tuple[int, int] = (127000, 127000),
    xfrm_attrs: str = "",
) -> str:
    return (
        f'<p:grpSp><p:nvGrpSpPr><p:cNvPr id="{shape_id}" name="Group {shape_id}"/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>'
        f"<p:grpSpPr><a:xfrm{xfrm_attrs}>"
        f'<a:off x="{off[0]}" y="{off[1]}"/><a:ext cx="{ext[0]}" cy="{ext[1]}"/>'
        f'<a:chOff x="{ch_off[0]}" y="{ch_off[1]}"/><a:chExt cx="{ch_ext[0]}" cy="{ch_ext[1]}"/>'
        f"</a:xfrm></p:grpSpPr>{''.join(children)}</p:grpSp>"
    )


def slide_xml(*shapes: str, background: str = "", show: Optional[str] = None) -> str:
    show_attr = f' show="{show}"' if show is not None else ""
    return (
        f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n<p:sld {NS}{show_attr}><p:cSld>{background}'
        '<p:spTree><p:nvGrpSpPr><p:cNvPr id="1" name=""/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>'
        '<p:grpSpPr><a:xfrm><a:off x="0" y="0"/><a:ext cx="0" cy="0"/>'
        '<a:chOff x="0" y="0"/><a:chExt cx="0" cy="0"/></a:xfrm></p:grpSpPr>'
        f"{''.join(shapes)}</p:spTree></p:cSld></p:sld>"
    )


def notes_xml(*paragraphs: str) -> str:
    return (
        f"<p:notes {NS}><p:cSld><p:spTree>"
        '<p:sp><p:nvSpPr><p:cNvPr id="2" name="Slide Image"/><p:cNvSpPr/><p:nvPr><p:ph type="sldImg"/></p:nvPr></p:nvSpPr>'
        "<p:spPr/></p:sp>"
        '<p:sp><p:nvSpPr><p:cNvPr id="3" name="Notes"/><p:cNvSpPr/><p:nvPr><p:ph type="body" idx="1"/></p:nvPr></p:nvSpPr>'
        f"<p:spPr/>{text_body_xml(*paragraphs)}</p:sp>"
        "</p:spTree></p:cSld></p:notes>"
    )


def theme_xml(
    colors: Optional[dict[str, str]] = None,
    major: str = "Calibri Light",
    minor: str = "Calibri",
    name: str = "Office Theme",
) -> str:
    colors = colors if colors is not None else {"dk1": "000000", "lt1": "FFFFFF", "accent1": "4472C4"}
    slots = "".join(f'<a:{slot}><a:srgbClr val="{value}"/></a:{slot}>' for slot, value in colors.items())
    return (
        f'<a:theme {NS} name="{name}"><a:themeElements>'
        f'<a:clrScheme name="Office">{slots}</a:clrScheme>'
        f'<a:fontScheme name="Office"><a:majorFont><a:latin typeface="{major}"/><a:ea typeface=""/><a:cs typeface=""/></a:majorFont>'
        f'<a:minorFont><a:latin typeface="{minor}"/><a:ea typeface=""/><a:cs typeface=""/></a:minorFont></a:fontScheme>'
        "</a:themeElements></a:theme>"
    )


def png_bytes(width: int = 4, height: int = 2, color: str = "red") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, "PNG")
    return buffer.getvalue()


def rels_xml(relationships: list[tuple[str, str, str, str]]) -> str:
    entries = "".join(
        f'<Relationship Id="{rel_id}" Type="{rel_type}" Target="{target}"'
        + (f' TargetMode="{mode}"' if mode != "Internal" else "")
        + "/>"
        for rel_id, rel_type, target, mode in relationships
    )
    return f'<?xml version="1.0" encoding="UTF-8"?>\n<Relationships xmlns="{RELS_NS}">{entries}</Relationships>'


# ============================================================================
# Package builder
# ============================================================================


class PptxBuilder:
    """Assembles a minimal but well-formed presentation package."""

    def __init__(self, width: int = 12192000, height: int = 6858000):
        self.width = width
        self.height = height
        self.theme: Optional[str] = theme_xml()
        self.declare_theme = True
        self.theme_target = "theme/theme1.xml"
        self.title: Optional[str] = "Quarterly Review"
        self.slides: list[tuple[int, str, list[tuple[str, str, str, str]]]] = []
        self.notes: dict[int, str] = {}
        self.media: dict[str, bytes] = {}

    def add_slide(
        self,
        xml: str,
        number: Optional[int] = None,
        images: Optional[dict[str, str]] = None,
        links: Optional[dict[str, str]] = None,
        notes: Optional[str] = None,
    ) -> str:
        """Add a slide part; ``images`` maps rIds to targets relative to the slide."""
        number = number if number is not None else len(self.slides) + 1
        rels = [(rel_id, RT.IMAGE, target, "Internal") for rel_id, target in (images or {}).items()]
        rels += [(rel_id, RT.HYPERLINK, target, "External") for rel_id, target in (links or {}).items()]
        if notes is not None:
            self.notes[number] = notes
            rels.append(("rIdNotes", RT.NOTES_SLIDE, f"../notesSlides/notesSlide{number}.xml", "Internal"))
        self.slides.append((number, xml, rels))
        return f"/ppt/slides/slide{number}.xml"

    def add_media(self, name: str, data: bytes) -> str:
        self.media[name] = data
        return f"../media/{name}"

    def _content_types(self) -> str:
        overrides = [("/ppt/presentation.xml", CT.PML_PRESENTATION_MAIN)]
        if self.declare_theme:
            overrides.append(("/ppt/theme/theme1.xml", CT.OFC_THEME))
        if self.title is not None:
            overrides.append(("/docProps/core.xml", CT.OPC_CORE_PROPERTIES))
        overrides += [(f"/ppt/slides/slide{number}.xml", CT.PML_SLIDE) for number, _, _ in self.slides]
        overrides += [(f"/ppt/notesSlides/notesSlide{number}.xml", CT.PML_NOTES_SLIDE) for number in self.notes]
        entries = "".join(f'<Override PartName="{name}" ContentType="{ct}"/>' for name, ct in overrides)
        return (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
            f'<Default Extension="rels" ContentType="{CT.OPC_RELATIONSHIPS}"/>'
            '<Default Extension="xml" ContentType="application/xml"/>'
            '<Default Extension="png" ContentType="image/png"/>'
            f"{entries}</Types>"
        )

    def _presentation(self) -> str:
        ids = "".join(
            f'<p:sldId id="{255 + index}" r:id="rIdSlide{number}"/>'
            for index, (number, _, _) in enumerate(self.slides, start=1)
        )
        return (
            f"<p:presentation {NS}><p:sldIdLst>{ids}</p:sldIdLst>"
            f'<p:sldSz cx="{self.width}" cy="{self.height}"/><p:notesSz cx="6858000" cy="9144000"/></p:presentation>'
        )

    def _core(self) -> str:
        return (
            '<cp:coreProperties xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties" '
            'xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:dcterms="http://purl.org/dc/terms/" '
            'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">'
            f"<dc:title>{self.title}</dc:title><dc:creator>Ada Analyst</dc:creator>"
            '<dcterms:created xsi:type="dcterms:W3CDTF">2024-01-02T03:04:05Z</dcterms:created>'
            "</cp:coreProperties>"
        )

    def build(self) -> bytes:
        root_rels = [("rId1", RT.OFFICE_DOCUMENT, "ppt/presentation.xml", "Internal")]
        if self.title is not None:
            root_rels.append(("rId2", RT.CORE_PROPERTIES, "docProps/core.xml", "Internal"))

        presentation_rels = []
        if self.declare_theme:
            presentation_rels.append(("rIdTheme", RT.THEME, self.theme_target, "Internal"))
        presentation_rels += [
            (f"rIdSlide{number}", RT.SLIDE, f"slides/slide{number}.xml", "Internal") for number, _, _ in self.slides
        ]

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            archive.writestr("[Content_Types].xml", self._content_types())
            archive.writestr("_rels/.rels", rels_xml(root_rels))
            archive.writestr("ppt/presentation.xml", self._presentation())
            archive.writestr("ppt/_rels/presentation.xml.rels", rels_xml(presentation_rels))
            if self.theme is not None:
                archive.writestr("ppt/theme/theme1.xml", self.theme)
            if self.title is not None:
                archive.writestr("docProps/core.xml", self._core())
            for number, xml, rels in self.slides:
                archive.writestr(f"ppt/slides/slide{number}.xml", xml)
                if rels:
                    archive.writestr(f"ppt/slides/_rels/slide{number}.xml.rels", rels_xml(rels))
            for number, text in self.notes.items():
                archive.writestr(f"ppt/notesSlides/notesSlide{number}.xml", notes_xml(*text.split("\n")))
            for name, data in self.media.items():
                archive.writestr(f"ppt/media/{name}", data)
        return buffer.getvalue()
