"""Per-file extractor base class.

Each extractor turns one source file into a FileRecord and writes the
cross-file facts it discovers (calls, type usage, public API entries,
package coupling) straight into the shared Outline.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from .models import FileRecord
from .outline import Outline

logger = logging.getLogger(__name__)


class FileExtractor(ABC):
    """Base class for language-specific file extraction."""

    def __init__(self, language: str):
        self.language = language

    def extract(self, record: FileRecord, outline: Outline) -> FileRecord:
        """Read a file and populate its record.

        Read failures and extractor exceptions are logged and leave the
        record empty or partially filled; they never propagate.

        Args:
            record: Record registered in the outline for this file
            outline: Shared outline receiving cross-file facts

        Returns:
            The same record
        """
        try:
            source = Path(record.abs_path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Error reading {record.path}: {e}")
            return record

        try:
            self.extract_source(source, record, outline)
        except Exception as e:
            logger.warning(f"Error extracting {record.path}: {e}")

        return record

    @abstractmethod
    def extract_source(self, source: str, record: FileRecord, outline: Outline) -> None:
        """Extract symbols from already-loaded source text."""
        pass
