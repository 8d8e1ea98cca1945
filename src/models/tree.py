"""Typed text tree decoded from a corpus JSON document.

A corpus document nests text arbitrarily: lists of chapters holding lists
of verses, or objects keyed by section name. The tree is decoded once into
``Leaf`` and ``Branch`` nodes so the flattener never inspects raw JSON.
Descriptive keys (titles, schema nodes, version attribution) are dropped
while decoding; only content keys survive as branch children.
"""

from __future__ import annotations

import logging
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

# Keys that describe a tree rather than hold content
METADATA_KEYS: frozenset[str] = frozenset(
    {
        "title",
        "heTitle",
        "categories",
        "sectionNames",
        "versionTitle",
        "versionSource",
        "versions",
        "nodes",
        "description",
        "schema",
        "order",
        "language",
        "textDepth",
    }
)


class Leaf(BaseModel):
    """A plain text value."""

    model_config = ConfigDict(frozen=True)

    text: str


class Branch(BaseModel):
    """An ordered set of content children.

    Children keep document order. List positions are integer keys and
    object members are string keys; a child of ``None`` marks a position
    that exists but holds no decodable content.
    """

    model_config = ConfigDict(frozen=True)

    children: dict[Union[int, str], Union[Leaf, Branch, None]] = Field(default_factory=dict)

    def keys(self) -> list[int | str]:
        return list(self.children)

    def get(self, key: int | str) -> TextNode | None:
        return self.children.get(key)


TextNode = Union[Leaf, Branch]

Branch.model_rebuild()


def decode_tree(raw: Any) -> TextNode | None:
    """Decode raw JSON into a text tree.

    Strings become leaves, lists and objects become branches, and
    anything else (null, numbers, booleans) is absent.
    """
    if isinstance(raw, str):
        return Leaf(text=raw)
    if isinstance(raw, list):
        return Branch(children={i: decode_tree(item) for i, item in enumerate(raw)})
    if isinstance(raw, dict):
        return Branch(
            children={
                key: decode_tree(value)
                for key, value in raw.items()
                if key not in METADATA_KEYS
            }
        )
    return None


class CorpusDocument(BaseModel):
    """One language variant of one work, as fetched from the corpus host."""

    title: str | None = None
    he_title: str | None = None
    language: str | None = None
    version_title: str | None = None
    tree: Union[Leaf, Branch, None] = None

    @classmethod
    def from_json(cls, data: Any) -> CorpusDocument:
        """Build a document from parsed JSON.

        Only ``text`` holds content; an object without it has no tree.
        """
        if not isinstance(data, dict):
            return cls(tree=decode_tree(data))

        return cls(
            title=_optional_str(data.get("title")),
            he_title=_optional_str(data.get("heTitle")),
            language=_optional_str(data.get("language")),
            version_title=_optional_str(data.get("versionTitle")),
            tree=decode_tree(data.get("text")),
        )


def _optional_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None
