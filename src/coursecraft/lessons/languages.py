"""Language table for code blocks.

The table maps a language key to a display label and an optional
highlighting grammar name. It is passed into the renderer and editor rather
than read from a global, so a deployment can add languages without touching
rendering logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from ..errors import ConfigurationError


@dataclass(frozen=True)
class LanguageSpec:
    """One entry of a LanguageTable.

    ``selectable`` entries are offered to authors; the others only exist so
    legacy fences in those languages still get a label and grammar.
    """

    key: str
    label: str
    grammar: str | None = None
    selectable: bool = True


class LanguageTable:
    """Ordered, immutable collection of LanguageSpec entries."""

    def __init__(self, specs: Iterable[LanguageSpec]) -> None:
        entries: dict[str, LanguageSpec] = {}
        for spec in specs:
            key = spec.key.lower()
            if key in entries:
                raise ConfigurationError(f"Duplicate language key: {spec.key}", setting="languages")
            entries[key] = spec
        if not any(spec.selectable for spec in entries.values()):
            raise ConfigurationError("Language table needs at least one selectable language", setting="languages")
        self._entries = entries

    def __iter__(self) -> Iterator[LanguageSpec]:
        return iter(self._entries.values())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> LanguageSpec | None:
        return self._entries.get(key.lower())

    @property
    def default(self) -> LanguageSpec:
        """First selectable language; used for new code blocks."""
        return next(spec for spec in self._entries.values() if spec.selectable)

    def selectable(self) -> list[LanguageSpec]:
        return [spec for spec in self._entries.values() if spec.selectable]

    def label_for(self, key: str) -> str:
        """Display label, falling back to the key itself for unknown languages."""
        spec = self.get(key)
        return spec.label if spec else key

    def grammar_for(self, key: str) -> str | None:
        spec = self.get(key)
        return spec.grammar if spec else None

    def extend(self, *specs: LanguageSpec) -> LanguageTable:
        """Return a new table with ``specs`` appended."""
        return LanguageTable([*self._entries.values(), *specs])


DEFAULT_LANGUAGES = LanguageTable([
    LanguageSpec("python", "Python", grammar="python"),
    LanguageSpec("javascript", "JavaScript", grammar="javascript"),
    LanguageSpec("cpp", "C++", grammar="cpp"),
    LanguageSpec("java", "Java", grammar="java"),
    LanguageSpec("sql", "SQL", grammar="sql"),
    LanguageSpec("html", "HTML", grammar="xml"),
    LanguageSpec("css", "CSS", grammar="css"),
    # Highlight-only entries seen in legacy fences
    LanguageSpec("typescript", "TypeScript", grammar="typescript", selectable=False),
    LanguageSpec("c", "C", grammar="cpp", selectable=False),
    LanguageSpec("xml", "XML", grammar="xml", selectable=False),
    LanguageSpec("bash", "Bash", grammar="bash", selectable=False),
    LanguageSpec("json", "JSON", grammar="json", selectable=False),
    LanguageSpec("text", "Text", selectable=False),
])
