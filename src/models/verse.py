"""Flattened verse record model."""

from pydantic import BaseModel, Field, model_validator

# Number of coordinate columns the store keeps per verse
MAX_COORDINATE_DEPTH = 5


def build_reference(work_slug: str, coordinates: list[int] | tuple[int, ...]) -> str:
    """Join a work slug and a coordinate tuple into a reference, e.g. ``Genesis.1.1``."""
    return ".".join([work_slug, *(str(c) for c in coordinates)])


class VerseRecord(BaseModel):
    """A single addressable leaf of a work, in both languages.

    Identity in the store is ``(reference, root_category)``.
    """

    reference: str
    coordinates: tuple[int, ...] = Field(min_length=1, max_length=MAX_COORDINATE_DEPTH)
    source_text: str | None = None
    translation_text: str | None = None
    work_id: str = ""
    root_category: str = ""

    @model_validator(mode="after")
    def _require_text(self) -> "VerseRecord":
        if not self.source_text and not self.translation_text:
            raise ValueError(f"Verse {self.reference} has no text in either language")
        return self

    @property
    def key(self) -> tuple[str, str]:
        return (self.reference, self.root_category)

    def coordinate(self, position: int) -> int | None:
        """Return the 1-based coordinate component at ``position`` (1..5), if any."""
        if position <= len(self.coordinates):
            return self.coordinates[position - 1]
        return None
