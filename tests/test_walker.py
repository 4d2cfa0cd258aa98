# tests/test_walker.py
from combiner.core.walker import IgnoreFileWalker, SimpleWalker, get_walker
from combiner.core.ignore import load_ignore_spec


def _make_tree(root):
    (root / "src").mkdir()
    (root / "src" / "main.py").write_text("print('main')")
    (root / "build").mkdir()
    (root / "build" / "out.js").write_text("var x;")
    (root / ".git").mkdir()
    (root / ".git" / "config").write_text("[core]")
    (root / "notes.tmp").write_text("scratch")
    (root / "README.md").write_text("# Project")
    (root / ".gitignore").write_text("build/\n*.tmp\n")


def _files(walker):
    return sorted(e.rel_path for e in walker.walk() if not e.is_dir)


def _dirs(walker):
    return sorted(e.rel_path for e in walker.walk() if e.is_dir)


def test_simple_walker_visits_everything(tmp_path):
    _make_tree(tmp_path)
    walker = SimpleWalker(tmp_path)
    assert _files(walker) == [
        ".git/config", ".gitignore", "README.md", "build/out.js", "notes.tmp", "src/main.py",
    ]
    assert _dirs(walker) == [".git", "build", "src"]


def test_ignore_file_walker_honours_gitignore(tmp_path):
    _make_tree(tmp_path)
    walker = IgnoreFileWalker(tmp_path)
    assert _files(walker) == [".gitignore", "README.md", "src/main.py"]
    assert _dirs(walker) == ["src"]


def test_combinerignore_is_read(tmp_path):
    (tmp_path / "keep.txt").write_text("keep")
    (tmp_path / "secret.txt").write_text("secret")
    (tmp_path / ".combinerignore").write_text("secret.txt\n")
    assert "secret.txt" not in _files(IgnoreFileWalker(tmp_path))


def test_output_file_is_never_yielded(tmp_path):
    (tmp_path / "a.txt").write_text("a")
    output = tmp_path / "out.txt"
    output.write_text("previous run")
    for walker in (SimpleWalker(tmp_path, output), IgnoreFileWalker(tmp_path, output)):
        assert _files(walker) == ["a.txt"]


def test_entries_carry_absolute_paths(tmp_path):
    (tmp_path / "pkg").mkdir()
    (tmp_path / "pkg" / "mod.py").write_text("")
    entries = list(SimpleWalker(tmp_path).walk())
    file_entry = [e for e in entries if not e.is_dir][0]
    assert file_entry.path == tmp_path.resolve() / "pkg" / "mod.py"
    assert file_entry.rel_path == "pkg/mod.py"


def test_walk_is_lazy(tmp_path):
    (tmp_path / "a.txt").write_text("a")
    gen = SimpleWalker(tmp_path).walk()
    assert next(gen).rel_path == "a.txt"


def test_unreadable_directory_is_logged_and_skipped(tmp_path, monkeypatch, caplog):
    (tmp_path / "a.txt").write_text("a")
    import os
    from combiner.core import walker as walker_module

    real_walk = os.walk

    def failing_walk(top, onerror=None, **kwargs):
        onerror(PermissionError(13, "Permission denied", str(tmp_path / "locked")))
        yield from real_walk(top, onerror=onerror, **kwargs)

    monkeypatch.setattr(walker_module.os, "walk", failing_walk)
    with caplog.at_level("WARNING"):
        assert _files(SimpleWalker(tmp_path)) == ["a.txt"]
    assert any("Permission denied" in r.getMessage() for r in caplog.records)


def test_get_walker_modes(tmp_path):
    assert isinstance(get_walker("simple", tmp_path), SimpleWalker)
    assert isinstance(get_walker("ignore-files", tmp_path), IgnoreFileWalker)


def test_load_ignore_spec_extra_patterns(tmp_path):
    (tmp_path / ".gitignore").write_text("*.tmp\n")
    spec = load_ignore_spec(tmp_path, extra_patterns=["dist/"])
    assert spec.match_file("x.tmp")
    assert spec.match_file("dist/bundle.js")
    assert not spec.match_file("src/app.py")


def test_nested_ignore_files_apply_to_their_own_directory(tmp_path):
    (tmp_path / "pkg").mkdir()
    (tmp_path / "pkg" / ".gitignore").write_text("secret.py\n/local.txt\n")
    (tmp_path / "pkg" / "ok.py").write_text("ok")
    (tmp_path / "pkg" / "secret.py").write_text("secret")
    (tmp_path / "pkg" / "local.txt").write_text("anchored to pkg/")
    (tmp_path / "pkg" / "deep").mkdir()
    (tmp_path / "pkg" / "deep" / "secret.py").write_text("also secret")
    (tmp_path / "pkg" / "deep" / "local.txt").write_text("not anchored here")
    (tmp_path / "secret.py").write_text("outside pkg, rule does not apply")

    assert _files(IgnoreFileWalker(tmp_path)) == [
        "pkg/.gitignore", "pkg/deep/local.txt", "pkg/ok.py", "secret.py",
    ]


def test_nested_ignore_file_prunes_directories(tmp_path):
    (tmp_path / "app").mkdir()
    (tmp_path / "app" / ".ignore").write_text("cache/\n")
    (tmp_path / "app" / "cache").mkdir()
    (tmp_path / "app" / "cache" / "blob.json").write_text("{}")
    (tmp_path / "app" / "main.py").write_text("")
    walker = IgnoreFileWalker(tmp_path)
    assert _dirs(walker) == ["app"]
    assert _files(walker) == ["app/.ignore", "app/main.py"]


def test_symlink_to_output_is_never_yielded(tmp_path):
    (tmp_path / "a.txt").write_text("a")
    output = tmp_path / "dump.txt"
    output.write_text("in progress")
    (tmp_path / "link.txt").symlink_to(output)
    for walker in (SimpleWalker(tmp_path, output), IgnoreFileWalker(tmp_path, output)):
        assert _files(walker) == ["a.txt"]
