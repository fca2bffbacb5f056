"""Per-slide processing state shared by the slide parser and processors."""

import threading
from dataclasses import dataclass, field, replace
from typing import Optional

from pptxjson.config import ParserOptions
from pptxjson.dsl.schema import GroupTransform, ParseWarning, Relationship, Theme
from pptxjson.parser.diagnostics import DiagnosticsSink, NullDiagnostics
from pptxjson.parser.package import PptxPackage


class IdGenerator:
    """Hands out element ids that are unique across a presentation.

    A source id is reused verbatim the first time it is seen. Repeats get a
    ``-N`` suffix, and every issued id is remembered so that suffixed ids
    can never collide with later source ids either.
    """

    def __init__(self):
        self._used: set[str] = set()
        self._counters: dict[str, int] = {}
        self._issued: dict[str, list[str]] = {}
        self._lock = threading.Lock()

    def generate(self, source_id: Optional[str] = None, kind: str = "element") -> str:
        """Issue a unique id derived from ``source_id`` (or ``kind`` when absent)."""
        base = (source_id or "").strip() or kind
        with self._lock:
            candidate = base
            if candidate in self._used:
                counter = self._counters.get(base, 1)
                while candidate in self._used:
                    counter += 1
                    candidate = f"{base}-{counter}"
                self._counters[base] = counter
            self._used.add(candidate)
            self._issued.setdefault(base, []).append(candidate)
            return candidate

    def derive(self, base_id: str, suffix: str) -> str:
        """Issue a unique id for a companion element (e.g. ``<id>_text``)."""
        return self.generate(f"{base_id}{suffix}")

    def issued_for(self, source_id: str) -> list[str]:
        """Ids issued so far for one source id, in issue order."""
        return list(self._issued.get(source_id, []))

    def __contains__(self, element_id: str) -> bool:
        return element_id in self._used

    def __len__(self) -> int:
        return len(self._used)


class WarningCollector:
    """Append-safe accumulator for parse warnings."""

    def __init__(self):
        self._warnings: list[ParseWarning] = []
        self._lock = threading.Lock()

    def add(
        self,
        message: str,
        level: str = "warning",
        slide_number: Optional[int] = None,
        element_id: Optional[str] = None,
    ) -> ParseWarning:
        warning = ParseWarning(
            level=level, message=message, slide_number=slide_number, element_id=element_id
        )
        with self._lock:
            self._warnings.append(warning)
        return warning

    @property
    def warnings(self) -> list[ParseWarning]:
        with self._lock:
            return list(self._warnings)

    def __len__(self) -> int:
        return len(self._warnings)


@dataclass(frozen=True)
class ProcessingContext:
    """State for decoding one slide.

    The id generator and warning collector are shared with the rest of the
    presentation; ``group_transform`` changes as the slide parser descends
    into groups (via ``with_group_transform``).
    """

    package: PptxPackage
    slide_number: int
    slide_id: str
    slide_part: str
    theme: Optional[Theme] = None
    relationships: dict[str, Relationship] = field(default_factory=dict)
    group_transform: Optional[GroupTransform] = None
    id_generator: IdGenerator = field(default_factory=IdGenerator)
    warnings: WarningCollector = field(default_factory=WarningCollector)
    options: ParserOptions = field(default_factory=ParserOptions)
    diagnostics: DiagnosticsSink = field(default_factory=NullDiagnostics)

    def with_group_transform(self, transform: Optional[GroupTransform]) -> "ProcessingContext":
        return replace(self, group_transform=transform)

    def warn(self, message: str, element_id: Optional[str] = None, level: str = "warning") -> None:
        self.warnings.add(message, level=level, slide_number=self.slide_number, element_id=element_id)
        self.diagnostics.log(message, level=level, slide=self.slide_number, element=element_id)

    def debug(self, message: str, **details) -> None:
        self.diagnostics.log(message, level="info", **details)
