"""Work catalog: the static table of works the pipeline knows how to ingest."""

from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

import yaml

from src.models.work import StructureKind, WorkDescriptor

CV = StructureKind.CHAPTER_VERSE

# (slug, sub-path, structure, depth)
DEFAULT_SEED: tuple[tuple[str, str, StructureKind, int], ...] = (
    # Torah
    ("Genesis", "Tanakh/Torah/Genesis", CV, 2),
    ("Exodus", "Tanakh/Torah/Exodus", CV, 2),
    ("Leviticus", "Tanakh/Torah/Leviticus", CV, 2),
    ("Numbers", "Tanakh/Torah/Numbers", CV, 2),
    ("Deuteronomy", "Tanakh/Torah/Deuteronomy", CV, 2),
    # Prophets
    ("Joshua", "Tanakh/Prophets/Joshua", CV, 2),
    ("Judges", "Tanakh/Prophets/Judges", CV, 2),
    ("I_Samuel", "Tanakh/Prophets/I Samuel", CV, 2),
    ("II_Samuel", "Tanakh/Prophets/II Samuel", CV, 2),
    ("I_Kings", "Tanakh/Prophets/I Kings", CV, 2),
    ("II_Kings", "Tanakh/Prophets/II Kings", CV, 2),
    ("Isaiah", "Tanakh/Prophets/Isaiah", CV, 2),
    ("Jeremiah", "Tanakh/Prophets/Jeremiah", CV, 2),
    ("Ezekiel", "Tanakh/Prophets/Ezekiel", CV, 2),
    ("Hosea", "Tanakh/Prophets/Hosea", CV, 2),
    ("Joel", "Tanakh/Prophets/Joel", CV, 2),
    ("Amos", "Tanakh/Prophets/Amos", CV, 2),
    ("Obadiah", "Tanakh/Prophets/Obadiah", CV, 2),
    ("Jonah", "Tanakh/Prophets/Jonah", CV, 2),
    ("Micah", "Tanakh/Prophets/Micah", CV, 2),
    ("Nahum", "Tanakh/Prophets/Nahum", CV, 2),
    ("Habakkuk", "Tanakh/Prophets/Habakkuk", CV, 2),
    ("Zephaniah", "Tanakh/Prophets/Zephaniah", CV, 2),
    ("Haggai", "Tanakh/Prophets/Haggai", CV, 2),
    ("Zechariah", "Tanakh/Prophets/Zechariah", CV, 2),
    ("Malachi", "Tanakh/Prophets/Malachi", CV, 2),
    # Writings
    ("Psalms", "Tanakh/Writings/Psalms", CV, 2),
    ("Proverbs", "Tanakh/Writings/Proverbs", CV, 2),
    ("Job", "Tanakh/Writings/Job", CV, 2),
    ("Song_of_Songs", "Tanakh/Writings/Song of Songs", CV, 2),
    ("Ruth", "Tanakh/Writings/Ruth", CV, 2),
    ("Lamentations", "Tanakh/Writings/Lamentations", CV, 2),
    ("Ecclesiastes", "Tanakh/Writings/Ecclesiastes", CV, 2),
    ("Esther", "Tanakh/Writings/Esther", CV, 2),
    ("Daniel", "Tanakh/Writings/Daniel", CV, 2),
    ("Ezra", "Tanakh/Writings/Ezra", CV, 2),
    ("Nehemiah", "Tanakh/Writings/Nehemiah", CV, 2),
    ("I_Chronicles", "Tanakh/Writings/I Chronicles", CV, 2),
    ("II_Chronicles", "Tanakh/Writings/II Chronicles", CV, 2),
    # Midrash Rabbah
    ("Genesis_Rabbah", "Midrash/Aggadah/Midrash Rabbah/Bereshit Rabbah", CV, 2),
    ("Exodus_Rabbah", "Midrash/Aggadah/Midrash Rabbah/Shemot Rabbah", CV, 2),
    ("Leviticus_Rabbah", "Midrash/Aggadah/Midrash Rabbah/Vayikra Rabbah", CV, 2),
    ("Numbers_Rabbah", "Midrash/Aggadah/Midrash Rabbah/Bamidbar Rabbah", CV, 2),
    ("Deuteronomy_Rabbah", "Midrash/Aggadah/Midrash Rabbah/Devarim Rabbah", CV, 2),
    ("Song_of_Songs_Rabbah", "Midrash/Aggadah/Midrash Rabbah/Shir HaShirim Rabbah", CV, 2),
    ("Ruth_Rabbah", "Midrash/Aggadah/Midrash Rabbah/Ruth Rabbah", CV, 2),
    ("Lamentations_Rabbah", "Midrash/Aggadah/Midrash Rabbah/Eichah Rabbah", CV, 2),
    ("Ecclesiastes_Rabbah", "Midrash/Aggadah/Midrash Rabbah/Kohelet Rabbah", CV, 2),
    ("Esther_Rabbah", "Midrash/Aggadah/Midrash Rabbah/Esther Rabbah", CV, 2),
    # Chasidut and Halakhah
    ("Tanya", "Chasidut/Chabad/Tanya", StructureKind.NAMED_SECTION, 2),
    (
        "Shulchan_Aruch_Orach_Chayim",
        "Halakhah/Shulchan Arukh/Shulchan Aruch, Orach Chayim",
        StructureKind.SECTION_SUBSECTION,
        3,
    ),
    (
        "Shulchan_Aruch_Yoreh_Deah",
        "Halakhah/Shulchan Arukh/Shulchan Aruch, Yoreh De'ah",
        StructureKind.SECTION_SUBSECTION,
        3,
    ),
)


class WorkCatalog(Mapping[str, WorkDescriptor]):
    """Read-only, ordered mapping of work slug to descriptor.

    Built once at startup and handed to the orchestrator; iteration follows
    the order entries were given in.
    """

    def __init__(self, descriptors: Iterable[WorkDescriptor]) -> None:
        entries: dict[str, WorkDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.slug in entries:
                raise ValueError(f"Duplicate catalog slug: '{descriptor.slug}'")
            entries[descriptor.slug] = descriptor
        self._entries = MappingProxyType(entries)

    def __getitem__(self, slug: str) -> WorkDescriptor:
        return self._entries[slug]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def subset(self, slugs: Iterable[str]) -> "WorkCatalog":
        """Return a catalog restricted to ``slugs``, in catalog order.

        Raises:
            KeyError: If any slug is not in this catalog.
        """
        wanted = set(slugs)
        unknown = wanted - set(self._entries)
        if unknown:
            raise KeyError(f"Unknown work slug(s): {', '.join(sorted(unknown))}")
        return WorkCatalog(d for slug, d in self._entries.items() if slug in wanted)


def default_catalog() -> WorkCatalog:
    """Build the catalog of works shipped with the pipeline."""
    return WorkCatalog(
        WorkDescriptor(slug=slug, sub_path=sub_path, structure=structure, depth=depth)
        for slug, sub_path, structure, depth in DEFAULT_SEED
    )


def load_catalog(catalog_path: str | Path | None = None) -> WorkCatalog:
    """Load a catalog from YAML, or the default catalog when no path is given.

    The YAML file holds a ``works`` list of mappings with ``slug``,
    ``sub_path``, ``structure`` and ``depth``.

    Args:
        catalog_path: Optional path to a YAML catalog file.

    Returns:
        The loaded WorkCatalog.

    Raises:
        FileNotFoundError: If catalog_path is given but does not exist.
    """
    if catalog_path is None:
        return default_catalog()

    path = Path(catalog_path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return WorkCatalog(WorkDescriptor(**entry) for entry in data.get("works", []))
