"""Read-only access to the parts of an OOXML zip package.

Part names are handled as python-pptx ``PackURI`` values (absolute, with a
leading slash); relationship targets are resolved relative to their source
part with ``PackURI.from_rel_ref``.
"""

import io
import logging
import posixpath
import threading
import zipfile
from typing import Optional, Union

from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pptx.opc.packuri import PackURI

from pptxjson.dsl.schema import Relationship
from pptxjson.errors import PackageError, XmlSyntaxError
from pptxjson.parser.xml_node import XmlNode, find_children, get_attribute, parse_xml


logger = logging.getLogger(__name__)

CONTENT_TYPES_PART = "[Content_Types].xml"
DEFAULT_PRESENTATION_PART = "/ppt/presentation.xml"


def to_pack_uri(part_name: str) -> PackURI:
    """Normalize ``ppt/slides/slide1.xml`` or ``/ppt/...`` to a PackURI."""
    name = part_name.replace("\\", "/")
    if not name.startswith("/"):
        name = "/" + name
    return PackURI(posixpath.normpath(name))


def resolve_target(source_part: str, target: str) -> Optional[PackURI]:
    """Resolve a relationship target against the part that declares it.

    Absolute targets (leading slash) are taken as-is.
    """
    if not target:
        return None
    target = target.replace("\\", "/")
    if target.startswith("/"):
        return to_pack_uri(target)
    return PackURI.from_rel_ref(to_pack_uri(source_part).baseURI, target)


class PptxPackage:
    """An opened presentation package.

    Use as a context manager; the underlying zip is closed on exit.

    Example:
        with PptxPackage(data) as package:
            slide_xml = package.read_xml("/ppt/slides/slide1.xml")
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        self.size = len(data)
        try:
            self._zip = zipfile.ZipFile(io.BytesIO(bytes(data)))
        except (zipfile.BadZipFile, ValueError) as e:
            raise PackageError(f"Input is not a zip package: {e}") from e
        self._lock = threading.Lock()
        self._members = set(self._zip.namelist())
        self._names = {name.lower(): name for name in self._members}
        self._content_types: Optional[dict[str, str]] = None
        self._default_types: dict[str, str] = {}
        self._rels_cache: dict[str, dict[str, Relationship]] = {}

    def __enter__(self) -> "PptxPackage":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._zip.close()

    def _member_name(self, part_name: str) -> Optional[str]:
        member = to_pack_uri(part_name).membername
        if member in self._members:
            return member
        # Zip member names are case-sensitive, OPC part names are not.
        return self._names.get(member.lower())

    def has_part(self, part_name: str) -> bool:
        return self._member_name(part_name) is not None

    def read(self, part_name: str) -> Optional[bytes]:
        """Read a part's bytes; None when the part is absent."""
        member = self._member_name(part_name)
        if member is None:
            return None
        with self._lock:
            return self._zip.read(member)

    def read_xml(self, part_name: str) -> Optional[XmlNode]:
        """Read and parse an XML part; None when the part is absent.

        Raises:
            XmlSyntaxError: If the part is present but malformed.
        """
        data = self.read(part_name)
        if data is None:
            return None
        try:
            return parse_xml(data)
        except XmlSyntaxError as e:
            raise XmlSyntaxError(
                f"{part_name}: {e.message}", details={"part": part_name}
            ) from e

    @property
    def content_types(self) -> dict[str, str]:
        """Override content types keyed by part name (``/ppt/slides/slide1.xml``).

        Raises:
            PackageError: If the manifest is missing or unreadable.
        """
        if self._content_types is None:
            try:
                root = self.read_xml(CONTENT_TYPES_PART)
            except XmlSyntaxError as e:
                raise PackageError(f"Unreadable content types manifest: {e}") from e
            if root is None:
                raise PackageError("Package has no [Content_Types].xml manifest")
            overrides: dict[str, str] = {}
            for node in find_children(root, "Override"):
                part_name = get_attribute(node, "PartName")
                content_type = get_attribute(node, "ContentType")
                if part_name and content_type:
                    overrides[str(to_pack_uri(part_name))] = content_type
            for node in find_children(root, "Default"):
                extension = get_attribute(node, "Extension")
                content_type = get_attribute(node, "ContentType")
                if extension and content_type:
                    self._default_types[extension.lower()] = content_type
            self._content_types = overrides
        return self._content_types

    def content_type(self, part_name: str) -> Optional[str]:
        uri = to_pack_uri(part_name)
        declared = self.content_types.get(str(uri))
        if declared:
            return declared
        return self._default_types.get(uri.ext.lower())

    def parts_by_content_type(self, content_type: str) -> list[PackURI]:
        """Part names declared with ``content_type``, in manifest order."""
        return [
            PackURI(name) for name, declared in self.content_types.items() if declared == content_type
        ]

    def relationships(self, part_name: str) -> dict[str, Relationship]:
        """Relationships declared by a part, keyed by rId.

        A missing or malformed ``.rels`` part yields an empty map.
        """
        rels_name = to_pack_uri(part_name).rels_uri
        cached = self._rels_cache.get(rels_name)
        if cached is not None:
            return cached

        relationships: dict[str, Relationship] = {}
        try:
            root = self.read_xml(rels_name)
        except XmlSyntaxError as e:
            logger.warning(f"Ignoring malformed relationships part {rels_name}: {e}")
            root = None

        for node in find_children(root, "Relationship"):
            rel_id = get_attribute(node, "Id")
            target = get_attribute(node, "Target")
            if not rel_id or target is None:
                continue
            relationships[rel_id] = Relationship(
                id=rel_id,
                type=get_attribute(node, "Type", ""),
                target=target,
                target_mode=get_attribute(node, "TargetMode", "Internal"),
            )

        self._rels_cache[rels_name] = relationships
        return relationships

    def related_part(self, part_name: str, rel_type: str) -> Optional[PackURI]:
        """First internal part related to ``part_name`` by ``rel_type``."""
        for rel in self.relationships(part_name).values():
            if rel.type == rel_type and not rel.is_external:
                return resolve_target(part_name, rel.target)
        return None

    def presentation_part(self) -> PackURI:
        """Locate the main presentation part via the package relationships."""
        part = self.related_part("/", RT.OFFICE_DOCUMENT)
        if part is not None and self.has_part(part):
            return part
        return PackURI(DEFAULT_PRESENTATION_PART)
