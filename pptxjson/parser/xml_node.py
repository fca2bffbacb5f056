"""Namespace-agnostic XML tree used by every decoder.

lxml parses the part; the result is converted into an immutable XmlNode tree
whose names keep their document prefix (``a:srgbClr``) while every lookup
compares local names only, so callers never handle namespaces.
"""

import re
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

from lxml import etree

from pptxjson.errors import XmlSyntaxError


_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")


@dataclass(frozen=True)
class XmlNode:
    """An immutable XML element.

    Attributes:
        name: Qualified name with its document prefix (e.g. ``p:sp``).
        attributes: Attribute map, prefixed names kept (e.g. ``r:embed``).
        children: Child elements in document order.
        text: Text before the first child element.
        tail: Text following this element inside its parent.
    """

    name: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: tuple["XmlNode", ...] = ()
    text: str = ""
    tail: str = ""

    @property
    def local_name(self) -> str:
        return local_name(self.name)

    def __iter__(self) -> Iterator["XmlNode"]:
        return iter(self.children)

    def __repr__(self) -> str:
        return f"XmlNode({self.name!r}, children={len(self.children)})"


def local_name(name: str) -> str:
    """Get the local name without prefix (``srgbClr`` from ``a:srgbClr``)."""
    return name.rsplit(":", 1)[-1]


def _qualified_name(tag: str, prefix: Optional[str]) -> str:
    local = etree.QName(tag).localname
    return f"{prefix}:{local}" if prefix else local


def _convert(root: etree._Element) -> XmlNode:
    """Convert an lxml tree without recursion.

    Children are built before their parent (post-order), so each XmlNode can
    be created frozen with its final children tuple.
    """
    built: dict[int, XmlNode] = {}
    # Holding the child proxies keeps their id() stable until the parent is built.
    stack: list[tuple[etree._Element, Optional[list]]] = [(root, None)]

    while stack:
        element, kept = stack.pop()
        if kept is None:
            kept = list(element)
            stack.append((element, kept))
            for child in reversed(kept):
                if isinstance(child.tag, str):
                    stack.append((child, None))
            continue

        reverse_ns = {uri: prefix for prefix, uri in element.nsmap.items() if prefix}
        attributes: dict[str, str] = {}
        for key, value in element.attrib.items():
            qname = etree.QName(key)
            prefix = reverse_ns.get(qname.namespace) if qname.namespace else None
            attributes[_qualified_name(key, prefix)] = value

        children = []
        text = element.text or ""
        for child in kept:
            if isinstance(child.tag, str):
                children.append(built.pop(id(child)))
            elif child.tail:
                # Comments and processing instructions drop out, their tails stay.
                if children:
                    last = children[-1]
                    children[-1] = XmlNode(
                        last.name, last.attributes, last.children, last.text, last.tail + child.tail
                    )
                else:
                    text += child.tail

        built[id(element)] = XmlNode(
            name=_qualified_name(element.tag, element.prefix),
            attributes=attributes,
            children=tuple(children),
            text=text,
            tail=element.tail or "",
        )

    return built[id(root)]


def parse_xml(source: Union[str, bytes]) -> XmlNode:
    """Parse XML text into an XmlNode tree.

    Args:
        source: XML document as text or raw bytes.

    Returns:
        Root XmlNode.

    Raises:
        XmlSyntaxError: If the document is empty or not well-formed.
    """
    if isinstance(source, str):
        source = _XML_DECLARATION.sub("", source.lstrip("\ufeff"), count=1).encode("utf-8")

    if not source or not source.strip():
        raise XmlSyntaxError("Empty XML document")

    parser = etree.XMLParser(
        huge_tree=True,
        resolve_entities=False,
        no_network=True,
        remove_blank_text=False,
    )
    try:
        root = etree.fromstring(source, parser=parser)
    except etree.XMLSyntaxError as e:
        line, column = e.position if e.position else (None, None)
        raise XmlSyntaxError(f"Malformed XML: {e.msg}", line=line, column=column) from e

    return _convert(root)


def iter_nodes(root: XmlNode) -> Iterator[XmlNode]:
    """Yield root and all descendants in pre-order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def find_node(root: Optional[XmlNode], name: str) -> Optional[XmlNode]:
    """Find the first node (root included) whose local name matches, pre-order."""
    if root is None:
        return None
    for node in iter_nodes(root):
        if node.local_name == name:
            return node
    return None


def find_nodes(root: Optional[XmlNode], name: str) -> list[XmlNode]:
    """Find all nodes (root included) whose local name matches, in document order."""
    if root is None:
        return []
    return [node for node in iter_nodes(root) if node.local_name == name]


def find_child(node: Optional[XmlNode], name: str) -> Optional[XmlNode]:
    """Find the first direct child whose local name matches."""
    if node is None:
        return None
    for child in node.children:
        if child.local_name == name:
            return child
    return None


def find_children(node: Optional[XmlNode], name: str) -> list[XmlNode]:
    """Find all direct children whose local name matches."""
    if node is None:
        return []
    return [child for child in node.children if child.local_name == name]


def find_path(node: Optional[XmlNode], *names: str) -> Optional[XmlNode]:
    """Walk direct children by local name, e.g. ``find_path(sp, "spPr", "xfrm")``."""
    for name in names:
        node = find_child(node, name)
        if node is None:
            return None
    return node


def get_attribute(node: Optional[XmlNode], name: str, default: Optional[str] = None) -> Optional[str]:
    """Get an attribute by exact name, falling back to a local-name match."""
    if node is None:
        return default
    if name in node.attributes:
        return node.attributes[name]
    wanted = local_name(name)
    for key, value in node.attributes.items():
        if local_name(key) == wanted:
            return value
    return default


def get_text_content(node: Optional[XmlNode]) -> str:
    """Concatenate all text below node in document order."""
    if node is None:
        return ""
    parts: list[str] = []
    # Entries are nodes to open, or plain strings (tails) to emit.
    stack: list[Union[XmlNode, str]] = [node]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue
        parts.append(item.text)
        for child in reversed(item.children):
            if child.tail:
                stack.append(child.tail)
            stack.append(child)
    return "".join(parts)
