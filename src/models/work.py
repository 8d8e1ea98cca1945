"""Work, category and catalog descriptor models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class StructureKind(str, Enum):
    """How a work's leaf coordinates are read for display."""

    CHAPTER_VERSE = "chapter_verse"
    LEAF_LINE = "leaf_line"  # daf / line
    SECTION_SUBSECTION = "section_subsection"  # siman / seif
    NAMED_SECTION = "named_section"


class WorkDescriptor(BaseModel):
    """A static catalog entry describing where a work lives and how it is shaped."""

    model_config = ConfigDict(frozen=True)

    slug: str
    sub_path: str  # e.g. "Tanakh/Torah/Genesis", unencoded
    structure: StructureKind
    depth: int = Field(ge=2, le=5)

    @property
    def path_segments(self) -> list[str]:
        return [segment for segment in self.sub_path.split("/") if segment]

    @property
    def category_segments(self) -> list[str]:
        """The taxonomy segments: the sub-path minus the work's own name."""
        return self.path_segments[:-1]


def segment_key(segment: str) -> str:
    """Normalize a human-readable path segment into a path key component."""
    return segment.strip().replace(" ", "_")


def category_path_key(segments: list[str]) -> str:
    """Dot-join the normalized segments of a category path."""
    return ".".join(segment_key(segment) for segment in segments)


def root_category_of(path_key: str) -> str:
    """Return the first component of a dot-joined category path key."""
    return path_key.split(".")[0]


class Category(BaseModel):
    """A single node in the taxonomy, identified by its full path key."""

    slug: str
    path: str
    en_title: str
    he_title: str

    @property
    def parent_path(self) -> str | None:
        if "." not in self.path:
            return None
        return self.path.rsplit(".", 1)[0]


def categories_for(descriptor: WorkDescriptor) -> list[Category]:
    """Build every category prefix of a work's path, shortest first.

    ``Tanakh/Torah/Genesis`` yields ``Tanakh`` then ``Tanakh.Torah``.
    """
    segments = descriptor.category_segments
    categories: list[Category] = []
    for i, segment in enumerate(segments):
        categories.append(
            Category(
                slug=segment_key(segment),
                path=category_path_key(segments[: i + 1]),
                en_title=segment,
                he_title=segment,
            )
        )
    return categories


class Work(BaseModel):
    """A registered work ("book") in the store."""

    id: str
    slug: str
    category_path: str
    en_title: str
    he_title: str
    structure: StructureKind
    depth: int

    @property
    def root_category(self) -> str:
        return root_category_of(self.category_path)
