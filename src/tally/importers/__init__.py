"""
Statement Importers Package

Parsers that turn bank and card statement exports into ParsedTransaction
records. Parsers are pure: they never touch the ledger.

Key Components:
- tabular: delimited exports with a caller-declared ColumnMapping
- fixed_layout: line-oriented bank text exports
- document: heuristic parsing of text extracted from PDF statements
- classifiers: ordered line classifiers used by the document parser
- extraction: TextExtractor protocol and the pdfplumber implementation
"""

from .classifiers import LineClassification, LineKind, classify_line
from .document import (
    DocumentPreview,
    parse_document,
    preview_document,
    preview_document_text,
)
from .extraction import PdfTextExtractor, TextExtractor
from .fixed_layout import FixedLayoutPreview, parse_fixed_layout, preview_fixed_layout
from .tabular import RowError, TabularParseResult, TabularPreview, parse_tabular, preview_tabular

__all__ = [
    "DocumentPreview",
    "FixedLayoutPreview",
    "LineClassification",
    "LineKind",
    "PdfTextExtractor",
    "RowError",
    "TabularParseResult",
    "TabularPreview",
    "TextExtractor",
    "classify_line",
    "parse_document",
    "parse_fixed_layout",
    "parse_tabular",
    "preview_document",
    "preview_document_text",
    "preview_fixed_layout",
    "preview_tabular",
]
