#!/usr/bin/env python3
"""
Error Types for Tally

All application errors derive from TallyError so callers can catch the whole
family at once. Parsers raise as little as possible: noisy statement lines are
skipped, and only structural failures (unreadable file, missing header,
image-only document) are fatal.
"""


class TallyError(Exception):
    """Base class for all Tally errors."""


class FormatError(TallyError, ValueError):
    """An amount or date could not be parsed. Recoverable per row."""


class AmountFormatError(FormatError):
    """Unparseable monetary amount."""


class DateFormatError(FormatError):
    """Unparseable date."""


class SourceUnreadable(TallyError):
    """A file or document could not be opened, decoded, or its header read."""


class LowSignalDocument(TallyError):
    """
    Extracted document text is too short to parse.

    Usually means the PDF is a scanned image. The caller should ask the user
    for a different export format rather than accept an empty result.
    """

    def __init__(self, message: str, char_count: int = 0):
        super().__init__(message)
        self.char_count = char_count


class NotFound(TallyError):
    """A referenced entity (account, transaction, category, rule) does not exist."""


class ValidationError(TallyError, ValueError):
    """Input failed validation (bad month filter, unknown category, etc.)."""


class StorageUnavailable(TallyError):
    """The ledger store cannot be read, written, or has been closed."""
