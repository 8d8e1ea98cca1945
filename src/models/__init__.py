"""Data models for the corpus ingestion pipeline."""

from src.models.report import CatalogRunReport, WorkRunReport, WorkState
from src.models.tree import Branch, CorpusDocument, Leaf, TextNode, decode_tree
from src.models.verse import VerseRecord, build_reference
from src.models.work import Category, StructureKind, Work, WorkDescriptor

__all__ = [
    "Branch",
    "CatalogRunReport",
    "Category",
    "CorpusDocument",
    "Leaf",
    "StructureKind",
    "TextNode",
    "VerseRecord",
    "Work",
    "WorkDescriptor",
    "WorkRunReport",
    "WorkState",
    "build_reference",
    "decode_tree",
]
