# tests/test_processor.py
import pytest

from combiner.core.processor import process_file
from combiner.errors import FileProcessingError


def test_process_file_returns_content_tokens_and_size(tmp_path, fake_tokenizer):
    path = tmp_path / "hello.py"
    path.write_text("print('héllo') # two", encoding="utf-8")
    result = process_file(path, fake_tokenizer)
    assert result.content == "print('héllo') # two"
    assert result.token_count == 3
    # é is two bytes in UTF-8
    assert result.byte_size == len("print('héllo') # two".encode("utf-8"))


def test_invalid_utf8_is_a_processing_error(tmp_path, fake_tokenizer):
    path = tmp_path / "data.txt"
    path.write_bytes(b"\xff\xfe\x00garbage")
    with pytest.raises(FileProcessingError) as excinfo:
        process_file(path, fake_tokenizer, display_path="data.txt")
    assert excinfo.value.path == "data.txt"
    assert excinfo.value.reason == "not valid UTF-8"
    assert isinstance(excinfo.value.cause, UnicodeDecodeError)


def test_missing_file_is_a_processing_error(tmp_path, fake_tokenizer):
    with pytest.raises(FileProcessingError) as excinfo:
        process_file(tmp_path / "gone.txt", fake_tokenizer)
    assert isinstance(excinfo.value.cause, FileNotFoundError)
    assert "No such file" in excinfo.value.reason


def test_empty_file(tmp_path, fake_tokenizer):
    path = tmp_path / "empty.txt"
    path.write_text("")
    result = process_file(path, fake_tokenizer)
    assert (result.content, result.token_count, result.byte_size) == ("", 0, 0)
