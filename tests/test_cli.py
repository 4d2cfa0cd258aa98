# tests/test_cli.py
import pytest

from combiner.cli import main


@pytest.fixture
def project(tmp_path):
    """A small project tree with a .gitignore, a log directory and a binary asset."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "main.py").write_text("def hello():\n  print('hello')", encoding="utf-8")
    (src / "utils.py").write_text("# This is a utility", encoding="utf-8")

    logs = tmp_path / "logs"
    logs.mkdir()
    (logs / "app.log").write_text("ERROR: ...", encoding="utf-8")

    (tmp_path / "README.md").write_text("# My Project", encoding="utf-8")
    (tmp_path / "latin1.txt").write_bytes("café".encode("latin-1"))
    (tmp_path / "image.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR")
    (tmp_path / ".gitignore").write_text("src/utils.py\n", encoding="utf-8")
    return tmp_path


def test_end_to_end_run(project, loaded_schemes, capsys):
    output_file = project / "test_merge.txt"
    exit_code = main(["-d", str(project), "-o", str(output_file), "--sort"])
    assert exit_code == 0

    content = output_file.read_text(encoding="utf-8")
    assert "--- File: src/main.py ---" in content
    assert "def hello():" in content
    assert "--- File: README.md ---" in content
    assert "# My Project" in content

    assert "logs/app.log" not in content
    assert "src/utils.py" not in content
    assert "PNG" not in content

    out = capsys.readouterr().out
    for label in ("Output File", "Files Processed", "Directories Visited", "Total Tokens",
                  "Max Tokens", "Processing Time"):
        assert label in out
    assert "Skipped Files (1)" in out
    assert "latin1.txt" in out


def test_default_output_goes_into_directory(project, loaded_schemes):
    assert main(["-d", str(project)]) == 0
    assert (project / f"combiner_{project.name}.txt").exists()


def test_tokenizer_flag(project, loaded_schemes, capsys):
    assert main(["-d", str(project), "-o", str(project / "o.txt"), "-t", "GPT-4o"]) == 0
    assert loaded_schemes == ["o200k_base"]
    assert "o200k_base" in capsys.readouterr().out


def test_ignore_and_include_flags(project, loaded_schemes):
    output_file = project / "out.txt"
    assert main(["-d", str(project), "-o", str(output_file), "-I", "src", "-i", "main.py"]) == 0
    assert "--- File:" not in output_file.read_text(encoding="utf-8")


def test_skipped_table_hidden_when_empty(tmp_path, loaded_schemes, capsys):
    (tmp_path / "a.txt").write_text("a")
    assert main(["-d", str(tmp_path), "-o", str(tmp_path / "o.txt")]) == 0
    assert "Skipped Files" not in capsys.readouterr().out


def test_invalid_directory(tmp_path, capsys):
    assert main(["-d", str(tmp_path / "missing")]) == 1
    assert "Error: Invalid directory" in capsys.readouterr().err


def test_bad_config_file(tmp_path, capsys):
    (tmp_path / "combiner.toml").write_text("nonsense = 1\n")
    assert main(["-d", str(tmp_path)]) == 1
    assert "Unknown key" in capsys.readouterr().err
