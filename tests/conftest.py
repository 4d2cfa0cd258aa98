# tests/conftest.py
import pytest
import tiktoken

from combiner.utils.tokenizer import TokenizationScheme, Tokenizer


class FakeEncoding:
    """Whitespace 'tokenizer' so tests do not need tiktoken's vocabularies."""

    def __init__(self, name="fake"):
        self.name = name

    def encode(self, text, allowed_special=frozenset(), disallowed_special="all"):
        return text.split()


@pytest.fixture
def fake_tokenizer():
    return Tokenizer(TokenizationScheme.CL100K_BASE, FakeEncoding())


@pytest.fixture
def loaded_schemes(monkeypatch):
    """Replaces tiktoken.get_encoding and records which vocabularies were requested."""
    requested = []

    def get_encoding(name):
        requested.append(name)
        return FakeEncoding(name)

    Tokenizer.clear_cache()
    monkeypatch.setattr(tiktoken, "get_encoding", get_encoding)
    yield requested
    Tokenizer.clear_cache()


@pytest.fixture
def sample_tree(tmp_path):
    """
    file1.txt, file2.txt, subdir/file3.txt, one file that is not UTF-8,
    plus a binary-extension file that must never be read.
    """
    root = tmp_path / "project"
    root.mkdir()
    (root / "file1.txt").write_text("A", encoding="utf-8")
    (root / "file2.txt").write_text("B", encoding="utf-8")
    (root / "subdir").mkdir()
    (root / "subdir" / "file3.txt").write_text("C", encoding="utf-8")
    (root / "broken.txt").write_bytes(b"\xff\xfe\x00\x9c invalid")
    (root / "image.bin").write_bytes(b"\x00\x01\x02")
    return root
