"""Corpus enumerators for the face search engine.

A corpus is the set of stored images a search request compares against.
Candidates are listed once per request in a deterministic order; their
bytes are read lazily during evaluation.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from face_search.errors import StorageError
from face_search.interfaces import Candidate
from face_search.logging_config import get_logger

logger = get_logger(__name__)


class DirectoryCorpus:
    """Corpus backed by the files of a single directory.

    Every regular, non-hidden file directly under ``root`` is a candidate,
    identified by its file name and ordered by name. Sub-directories are
    not descended into.

    Attributes:
        root: Corpus directory
        extensions: Optional lowercase suffix filter (e.g. {".jpg", ".png"})

    Example:
        >>> corpus = DirectoryCorpus("images")
        >>> for candidate in corpus.list_candidates():
        ...     print(candidate.id)
    """

    def __init__(
        self,
        root: str | Path,
        extensions: Optional[Iterable[str]] = None,
    ):
        """Initialize directory corpus.

        Args:
            root: Directory holding the stored images
            extensions: Accepted file suffixes. None accepts every file.
        """
        self.root = Path(root)
        self.extensions = (
            None
            if extensions is None
            else {self._normalize_ext(ext) for ext in extensions}
        )

    @staticmethod
    def _normalize_ext(ext: str) -> str:
        ext = ext.strip().lower()
        return ext if ext.startswith(".") else f".{ext}"

    def _accepts(self, path: Path) -> bool:
        if path.name.startswith("."):
            return False
        if self.extensions is not None and path.suffix.lower() not in self.extensions:
            return False
        return path.is_file()

    def list_candidates(self) -> List[Candidate]:
        """List the corpus files as candidates, sorted by file name.

        Returns:
            List of Candidate objects (may be empty).

        Raises:
            StorageError: If the root is missing, not a directory, or unreadable.
        """
        if not self.root.is_dir():
            raise StorageError(f"Corpus directory not found: {self.root}")

        try:
            paths = sorted(
                (p for p in self.root.iterdir() if self._accepts(p)),
                key=lambda p: p.name,
            )
        except OSError as e:
            raise StorageError(f"Cannot list corpus directory {self.root}: {e}") from e

        logger.debug(f"Listed {len(paths)} candidate(s) in {self.root}")

        return [Candidate(id=self._candidate_id(path), fetch=path.read_bytes) for path in paths]

    @staticmethod
    def _candidate_id(path: Path) -> str:
        """File name as clean text.

        Names that are not valid UTF-8 come back from the OS with surrogate
        escapes, which cannot be encoded into a response. Undecodable bytes
        are replaced with U+FFFD; the file itself is still read by path.
        """
        return os.fsencode(path.name).decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        """String representation of corpus."""
        exts = "*" if self.extensions is None else ",".join(sorted(self.extensions))
        return f"DirectoryCorpus(root='{self.root}', extensions={exts})"


class InMemoryCorpus:
    """Corpus over (id, bytes) pairs held in memory, in the given order."""

    def __init__(self, items: Iterable[Tuple[str, bytes]]):
        self._candidates = [Candidate.from_bytes(cid, data) for cid, data in items]

    def list_candidates(self) -> List[Candidate]:
        return list(self._candidates)

    def __repr__(self) -> str:
        return f"InMemoryCorpus(candidates={len(self._candidates)})"
