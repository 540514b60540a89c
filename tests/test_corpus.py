"""Unit tests for corpus enumerators."""

from __future__ import annotations

import os
import sys

import pytest

from face_search.corpus import DirectoryCorpus, InMemoryCorpus
from face_search.errors import StorageError


@pytest.fixture
def corpus_dir(tmp_path):
    """Create a corpus directory with images, a hidden file and a sub-directory."""
    (tmp_path / "b_party.jpg").write_bytes(b"party")
    (tmp_path / "a_beach.PNG").write_bytes(b"beach")
    (tmp_path / "c_notes.txt").write_bytes(b"notes")
    (tmp_path / ".DS_Store").write_bytes(b"junk")
    (tmp_path / "nested").mkdir()
    (tmp_path / "nested" / "inner.jpg").write_bytes(b"inner")
    return tmp_path


def test_list_candidates_sorted(corpus_dir):
    """Test that regular, visible files are listed by name."""
    candidates = DirectoryCorpus(corpus_dir).list_candidates()

    assert [c.id for c in candidates] == ["a_beach.PNG", "b_party.jpg", "c_notes.txt"]


def test_candidate_bytes_are_read_lazily(corpus_dir):
    """Test that bytes are read when requested, not when listed."""
    candidates = DirectoryCorpus(corpus_dir).list_candidates()
    (corpus_dir / "b_party.jpg").write_bytes(b"party v2")

    assert candidates[0].read_bytes() == b"beach"
    assert candidates[1].read_bytes() == b"party v2"


def test_deleted_candidate_fails_on_read(corpus_dir):
    """Test that a file removed after listing only fails its own read."""
    candidates = DirectoryCorpus(corpus_dir).list_candidates()
    (corpus_dir / "b_party.jpg").unlink()

    with pytest.raises(FileNotFoundError):
        candidates[1].read_bytes()
    assert candidates[0].read_bytes() == b"beach"


def test_extension_filter(corpus_dir):
    """Test case-insensitive extension filtering."""
    corpus = DirectoryCorpus(corpus_dir, extensions=["jpg", ".png"])

    assert [c.id for c in corpus.list_candidates()] == ["a_beach.PNG", "b_party.jpg"]
    assert "jpg" in repr(corpus)


def test_empty_directory(tmp_path):
    """Test that an empty directory is an empty corpus."""
    assert DirectoryCorpus(tmp_path).list_candidates() == []


def test_missing_directory(tmp_path):
    """Test that a missing directory raises StorageError."""
    with pytest.raises(StorageError, match="not found"):
        DirectoryCorpus(tmp_path / "missing").list_candidates()


def test_file_as_root(tmp_path):
    """Test that a file given as root raises StorageError."""
    path = tmp_path / "image.jpg"
    path.write_bytes(b"x")

    with pytest.raises(StorageError):
        DirectoryCorpus(path).list_candidates()


def test_in_memory_corpus_keeps_order():
    """Test that in-memory candidates keep insertion order."""
    corpus = InMemoryCorpus([("z.jpg", b"z"), ("a.jpg", b"a")])
    candidates = corpus.list_candidates()

    assert [c.id for c in candidates] == ["z.jpg", "a.jpg"]
    assert candidates[1].read_bytes() == b"a"
    assert repr(corpus) == "InMemoryCorpus(candidates=2)"


@pytest.mark.skipif(sys.platform != "linux", reason="non-UTF-8 file names")
def test_non_utf8_file_name(tmp_path):
    """Test that a non-UTF-8 file name becomes an encodable id and stays readable."""
    (tmp_path / os.fsdecode(b"caf\xe9.jpg")).write_bytes(b"cafe")
    (tmp_path / "ok.jpg").write_bytes(b"ok")

    candidates = DirectoryCorpus(tmp_path).list_candidates()

    ids = [c.id for c in candidates]
    assert ids == ["caf\ufffd.jpg", "ok.jpg"]
    for cid in ids:
        cid.encode("utf-8")
    assert candidates[0].read_bytes() == b"cafe"
