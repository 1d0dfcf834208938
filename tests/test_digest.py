import hashlib
import os
import sys

import pytest

from cachebust.digest import (
    AssetNotFoundError,
    CacheDigester,
    bust_cache,
    check_algorithm,
    directory_digest,
    file_digest,
    iter_directory_files,
)


def md5(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def make_sass(tmp_path):
    sass = tmp_path / "assets" / "_sass"
    (sass / "partials").mkdir(parents=True)
    (sass / "a.scss").write_bytes(b"a")
    (sass / "b.scss").write_bytes(b"b")
    return sass


def test_bust_cache_single_file(tmp_path):
    (tmp_path / "style.css").write_text("body{}", encoding="utf-8")
    assert bust_cache("style.css", root=tmp_path) == f"style.css?{md5(b'body{}')}"


def test_bust_cache_resolves_against_working_directory(monkeypatch, tmp_path):
    (tmp_path / "style.css").write_text("body{}", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    assert bust_cache("style.css") == f"style.css?{md5(b'body{}')}"


def test_digest_is_deterministic(tmp_path):
    path = tmp_path / "app.js"
    path.write_text("console.log(1);", encoding="utf-8")
    digester = CacheDigester(file_name="app.js", root=tmp_path)
    assert digester.digest() == digester.digest()
    assert file_digest(path) == file_digest(path)


def test_different_content_gives_different_digest(tmp_path):
    (tmp_path / "one.css").write_text("a{color:red}", encoding="utf-8")
    (tmp_path / "two.css").write_text("a{color:blue}", encoding="utf-8")
    assert file_digest(tmp_path / "one.css") != file_digest(tmp_path / "two.css")


def test_large_file_matches_whole_content_digest(tmp_path):
    payload = os.urandom(200 * 1024 + 17)
    path = tmp_path / "bundle.js"
    path.write_bytes(payload)
    assert file_digest(path) == md5(payload)


def test_directory_digest_concatenates_in_lexicographic_order(tmp_path):
    sass = make_sass(tmp_path)
    digester = CacheDigester(file_name="main.css", directory=sass)
    assert digester.hexdigest() == md5(b"ab")
    assert digester.digest() == f"main.css?{md5(b'ab')}"


def test_directory_branch_does_not_read_file_name(tmp_path):
    make_sass(tmp_path)
    result = bust_cache("does/not/exist.css", "assets/_sass", root=tmp_path)
    assert result == f"does/not/exist.css?{md5(b'ab')}"


def test_iter_directory_files_order_and_nesting(tmp_path):
    sass = make_sass(tmp_path)
    (sass / "partials" / "_z.scss").write_bytes(b"z")
    names = [p.relative_to(sass).as_posix() for p in iter_directory_files(sass)]
    assert names == ["a.scss", "b.scss", "partials/_z.scss"]
    assert directory_digest(sass) == md5(b"abz")


def test_directory_changes_change_digest(tmp_path):
    sass = make_sass(tmp_path)
    before = directory_digest(sass)

    (sass / "partials" / "_new.scss").write_bytes(b"$x: 1;")
    added = directory_digest(sass)
    assert added != before

    (sass / "partials" / "_new.scss").unlink()
    assert directory_digest(sass) == before

    (sass / "b.scss").write_bytes(b"B")
    assert directory_digest(sass) != before

    (sass / "b.scss").unlink()
    assert directory_digest(sass) == md5(b"a")


def test_directory_metadata_does_not_change_digest(tmp_path):
    sass = make_sass(tmp_path)
    before = directory_digest(sass)

    os.utime(sass / "a.scss", (0, 0))
    os.utime(sass, (0, 0))
    assert directory_digest(sass) == before

    renamed = sass.rename(tmp_path / "assets" / "styles")
    assert directory_digest(renamed) == before


def test_hidden_files_skipped_unless_requested(tmp_path):
    sass = make_sass(tmp_path)
    (sass / ".DS_Store").write_bytes(b"junk")
    (sass / ".cache").mkdir()
    (sass / ".cache" / "x.scss").write_bytes(b"x")
    assert directory_digest(sass) == md5(b"ab")
    # ".DS_Store" and ".cache/x.scss" sort before "a.scss"
    assert directory_digest(sass, include_hidden=True) == md5(b"junkxab")


def test_empty_directory_hashes_empty_content(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    assert directory_digest(empty) == md5(b"")


def test_missing_file_raises_not_found(tmp_path):
    with pytest.raises(AssetNotFoundError) as excinfo:
        bust_cache("missing.css", root=tmp_path)
    assert isinstance(excinfo.value, FileNotFoundError)
    assert excinfo.value.asset_type == "file"
    assert excinfo.value.searched_paths == [tmp_path / "missing.css"]
    assert "missing.css" in str(excinfo.value)


def test_missing_directory_raises_not_found(tmp_path):
    with pytest.raises(AssetNotFoundError) as excinfo:
        bust_cache("main.css", "assets/_sass", root=tmp_path)
    assert excinfo.value.asset_type == "directory"


def test_file_name_that_is_a_directory_raises(tmp_path):
    (tmp_path / "css").mkdir()
    with pytest.raises(IsADirectoryError):
        bust_cache("css", root=tmp_path)


def test_directory_that_is_a_file_raises(tmp_path):
    (tmp_path / "main.scss").write_text("a{}", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        bust_cache("main.css", "main.scss", root=tmp_path)


def test_absolute_paths_ignore_root(tmp_path):
    path = tmp_path / "app.js"
    path.write_bytes(b"x")
    other = tmp_path / "elsewhere"
    other.mkdir()
    assert bust_cache(str(path), root=other) == f"{path}?{md5(b'x')}"


def test_alternative_algorithm(tmp_path):
    path = tmp_path / "app.js"
    path.write_bytes(b"x")
    result = bust_cache("app.js", root=tmp_path, algorithm="SHA256")
    assert result == f"app.js?{hashlib.sha256(b'x').hexdigest()}"


def test_check_algorithm_rejects_unknown_and_variable_length():
    assert check_algorithm("MD5") == "md5"
    with pytest.raises(ValueError):
        check_algorithm("not-a-hash")
    with pytest.raises(ValueError):
        check_algorithm("shake_128")


needs_posix = pytest.mark.skipif(sys.platform == "win32", reason="POSIX only")
needs_permissions = pytest.mark.skipif(
    sys.platform == "win32" or os.geteuid() == 0,
    reason="file permissions are not enforced",
)


@needs_posix
def test_dangling_symlink_under_directory_raises(tmp_path):
    sass = tmp_path / "sass"
    sass.mkdir()
    (sass / "a.scss").write_bytes(b"a")
    (sass / "b.scss").symlink_to(sass / "gone.scss")
    with pytest.raises(FileNotFoundError):
        directory_digest(sass)


@needs_posix
def test_symlinked_file_under_directory_is_hashed(tmp_path):
    sass = tmp_path / "sass"
    sass.mkdir()
    (tmp_path / "shared.scss").write_bytes(b"s")
    (sass / "a.scss").write_bytes(b"a")
    (sass / "b.scss").symlink_to(tmp_path / "shared.scss")
    assert directory_digest(sass) == md5(b"as")


@needs_permissions
def test_unreadable_file_raises_permission_error(tmp_path):
    path = tmp_path / "app.js"
    path.write_bytes(b"x")
    path.chmod(0)
    with pytest.raises(PermissionError):
        file_digest(path)


@needs_permissions
def test_unreadable_file_under_directory_raises_permission_error(tmp_path):
    sass = make_sass(tmp_path)
    (sass / "b.scss").chmod(0)
    with pytest.raises(PermissionError):
        directory_digest(sass)
