"""Dual-tree flattener: walks two language variants of a work in lockstep."""

import logging
from collections.abc import Iterator

from pydantic import BaseModel

from src.models.tree import Branch, Leaf, TextNode
from src.models.verse import MAX_COORDINATE_DEPTH, VerseRecord, build_reference

logger = logging.getLogger(__name__)


class FlattenStats(BaseModel):
    """Counters collected while flattening one work."""

    emitted: int = 0
    empty_leaves: int = 0
    depth_mismatches: int = 0
    too_deep: int = 0
    unaddressable: int = 0


def flatten(
    source: TextNode | None,
    translation: TextNode | None,
    depth: int,
    work_slug: str,
    *,
    work_id: str = "",
    root_category: str = "",
    stats: FlattenStats | None = None,
) -> Iterator[VerseRecord]:
    """Flatten a source-language tree and its translation into verse records.

    Both trees are walked together. At each branch the children of the
    source node drive the walk (the translation's when the source is not a
    branch) and the same key is looked up on the other side. The
    coordinate for a child is its 1-based position among the branch's
    content children, which for lists is the index plus one.

    A record is emitted as soon as either side is a leaf, carrying the
    text of whichever side is one. Positions with no text on either side
    are dropped, as is a leaf reached before any branching, since it has
    no coordinate.

    Args:
        source: Source-language tree, or None if unavailable.
        translation: Translation tree, or None if unavailable.
        depth: Declared structural depth of the work.
        work_slug: Slug used as the reference prefix.
        work_id: Identifier stamped on every record.
        root_category: Root category stamped on every record.
        stats: Optional counters to update while walking.

    Yields:
        VerseRecord objects in document order.
    """
    counters = stats if stats is not None else FlattenStats()
    yield from _walk(
        source, translation, (), depth, work_slug, work_id, root_category, counters
    )

    if counters.depth_mismatches:
        logger.warning(
            "[%s] %d leaves do not match declared depth %d",
            work_slug,
            counters.depth_mismatches,
            depth,
        )


def _walk(
    source: TextNode | None,
    translation: TextNode | None,
    coords: tuple[int, ...],
    depth: int,
    work_slug: str,
    work_id: str,
    root_category: str,
    stats: FlattenStats,
) -> Iterator[VerseRecord]:
    if isinstance(source, Leaf) or isinstance(translation, Leaf):
        record = _leaf_record(
            source, translation, coords, depth, work_slug, work_id, root_category, stats
        )
        if record is not None:
            stats.emitted += 1
            yield record
        return

    driver = source if isinstance(source, Branch) else translation
    if not isinstance(driver, Branch):
        return

    for ordinal, key in enumerate(driver.keys(), start=1):
        next_source = source.get(key) if isinstance(source, Branch) else None
        next_translation = translation.get(key) if isinstance(translation, Branch) else None
        yield from _walk(
            next_source,
            next_translation,
            (*coords, ordinal),
            depth,
            work_slug,
            work_id,
            root_category,
            stats,
        )


def _leaf_record(
    source: TextNode | None,
    translation: TextNode | None,
    coords: tuple[int, ...],
    depth: int,
    work_slug: str,
    work_id: str,
    root_category: str,
    stats: FlattenStats,
) -> VerseRecord | None:
    if not coords:
        # TODO: decide whether root-level text should get a synthetic coordinate
        stats.unaddressable += 1
        logger.warning("[%s] Root-level text has no coordinate, skipped", work_slug)
        return None

    source_text = _text_of(source)
    translation_text = _text_of(translation)
    if source_text is None and translation_text is None:
        stats.empty_leaves += 1
        return None

    reference = build_reference(work_slug, coords)
    if len(coords) > MAX_COORDINATE_DEPTH:
        stats.too_deep += 1
        logger.warning("[%s] %s is nested too deeply to store, skipped", work_slug, reference)
        return None

    if len(coords) != depth:
        stats.depth_mismatches += 1

    return VerseRecord(
        reference=reference,
        coordinates=coords,
        source_text=source_text,
        translation_text=translation_text,
        work_id=work_id,
        root_category=root_category,
    )


def _text_of(node: TextNode | None) -> str | None:
    if isinstance(node, Leaf) and node.text:
        return node.text
    return None
