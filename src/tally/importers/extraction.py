#!/usr/bin/env python3
"""
Document Text Extraction

The heuristic document importer works on plain text. Turning a statement
document into that text is the job of a TextExtractor; PdfTextExtractor is
the default, built on pdfplumber.
"""

import logging
from pathlib import Path
from typing import Protocol

import pdfplumber

from ..core.errors import SourceUnreadable

logger = logging.getLogger(__name__)


class TextExtractor(Protocol):
    """Turns a document file into newline-delimited text."""

    def extract_text(self, path: Path) -> str:
        """
        Extract all text from a document.

        Raises:
            SourceUnreadable: If the document cannot be opened or decoded
        """
        ...


class PdfTextExtractor:
    """Extracts page text from PDF statements with pdfplumber."""

    def extract_text(self, path: Path) -> str:
        path = Path(path)
        if not path.exists():
            raise SourceUnreadable(f"Document not found: {path}")

        try:
            with pdfplumber.open(path) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as e:
            # pdfplumber surfaces pdfminer's parser errors under several types
            raise SourceUnreadable(f"Failed to open PDF {path}: {e}") from e

        logger.debug(f"Extracted {len(pages)} pages from {path.name}")
        return "".join(f"{page_text}\n" for page_text in pages)
