"""Content digests for cache busting.

This module turns the bytes of an asset, or of every file under a source
directory, into a hex digest and appends it to the asset reference as a query
string (``main.css?3f2a...``). When any byte changes the reference changes,
so browsers stop serving the stale cached copy.

Key components:
- CacheDigester: Computes the busted reference for one file or one directory.
- bust_cache: Plain function wrapper around CacheDigester.
- file_digest / directory_digest: Bare hex digests.
- iter_directory_files: The fixed enumeration order used for directories.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

DEFAULT_ALGORITHM = "md5"

# Variable-length digests need an explicit size for hexdigest()
_UNSUPPORTED_ALGORITHMS = frozenset({"shake_128", "shake_256"})

_CHUNK_SIZE = 64 * 1024


class AssetNotFoundError(FileNotFoundError):
    """Error raised when a file or directory to digest does not exist.

    Attributes:
        asset_name: The name of the asset that was requested.
        asset_type: Either "file" or "directory".
        searched_paths: List of paths that were searched.
    """

    def __init__(
        self,
        asset_name: str,
        asset_type: str,
        searched_paths: list[Path],
    ):
        self.asset_name = asset_name
        self.asset_type = asset_type
        self.searched_paths = searched_paths
        paths_str = ", ".join(str(p) for p in searched_paths)
        super().__init__(
            f"{asset_type} '{asset_name}' not found. Searched: {paths_str}"
        )


def check_algorithm(name: str) -> str:
    """Validate a hashlib algorithm name.

    Args:
        name: Algorithm name such as "md5" or "sha256".

    Returns:
        The normalized (lowercase) algorithm name.

    Raises:
        ValueError: If hashlib cannot produce a fixed-size hex digest for it.
    """
    normalized = str(name).lower()
    if (
        normalized not in hashlib.algorithms_available
        or normalized in _UNSUPPORTED_ALGORITHMS
    ):
        raise ValueError(f"Unsupported digest algorithm: {name}")
    return normalized


def _new_hasher(algorithm: str):
    return hashlib.new(check_algorithm(algorithm), usedforsecurity=False)


def _feed(hasher, path: Path) -> None:
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            hasher.update(chunk)


def _is_hidden(rel: Path) -> bool:
    return any(part.startswith(".") for part in rel.parts)


def iter_directory_files(
    directory: Path, include_hidden: bool = False
) -> Iterator[Path]:
    """Yield every regular file under a directory in digest order.

    Files are ordered lexicographically by their POSIX path relative to
    ``directory``. Directories themselves are never yielded;
    a dangling symlink is yielded and fails when read.

    Args:
        directory: Directory to walk recursively.
        include_hidden: Whether to include entries below a dot-prefixed component.

    Yields:
        Paths of regular files.
    """
    files = []
    for item in directory.rglob("*"):
        if item.is_dir():
            continue
        # Skip sockets and fifos; dangling symlinks stay and fail on read
        if not item.is_file() and not item.is_symlink():
            continue
        rel = item.relative_to(directory)
        if not include_hidden and _is_hidden(rel):
            continue
        files.append((rel.as_posix(), item))
    for _, item in sorted(files):
        yield item


def file_digest(path: Path, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Return the hex digest of a single file's bytes.

    Args:
        path: File to hash.
        algorithm: hashlib algorithm name.

    Returns:
        Lowercase hex digest.

    Raises:
        AssetNotFoundError: If the file doesn't exist.
        IsADirectoryError: If the path is a directory.
    """
    if not path.exists():
        raise AssetNotFoundError(str(path), "file", [path])
    if path.is_dir():
        raise IsADirectoryError(f"Expected a file but got a directory: {path}")
    hasher = _new_hasher(algorithm)
    _feed(hasher, path)
    return hasher.hexdigest()


def directory_digest(
    path: Path,
    algorithm: str = DEFAULT_ALGORITHM,
    include_hidden: bool = False,
) -> str:
    """Return the hex digest of every file under a directory.

    The result equals the digest of all file contents concatenated in
    ``iter_directory_files`` order. An empty directory hashes the empty string.

    Args:
        path: Directory to hash.
        algorithm: hashlib algorithm name.
        include_hidden: Whether dot-prefixed entries take part.

    Returns:
        Lowercase hex digest.

    Raises:
        AssetNotFoundError: If the directory doesn't exist.
        NotADirectoryError: If the path is a regular file.
    """
    if not path.exists():
        raise AssetNotFoundError(str(path), "directory", [path])
    if not path.is_dir():
        raise NotADirectoryError(f"Expected a directory but got a file: {path}")
    hasher = _new_hasher(algorithm)
    for item in iter_directory_files(path, include_hidden=include_hidden):
        _feed(hasher, item)
    return hasher.hexdigest()


@dataclass(frozen=True)
class CacheDigester:
    """Computes a cache-busted reference for an asset.

    When ``directory`` is None the bytes of ``file_name`` are hashed. When a
    directory is given, every file under it is hashed instead and
    ``file_name`` only serves as the label of the result. This is how a
    compiled stylesheet is busted by the digest of its Sass sources.

    Attributes:
        file_name: Asset reference used as the label (and hashed when no directory).
        directory: Optional source directory to hash instead of the file.
        root: Base directory for relative paths; the working directory when None.
        algorithm: hashlib algorithm name.
        include_hidden: Whether dot-prefixed entries under the directory count.
    """

    file_name: str
    directory: str | Path | None = None
    root: Path | None = None
    algorithm: str = DEFAULT_ALGORITHM
    include_hidden: bool = False

    def digest(self) -> str:
        """Return ``file_name`` followed by ``?`` and the content digest."""
        return f"{self.file_name}?{self.hexdigest()}"

    def hexdigest(self) -> str:
        """Return the bare content digest."""
        if self.directory is None:
            return file_digest(self._resolve(self.file_name), self.algorithm)
        return directory_digest(
            self._resolve(self.directory),
            self.algorithm,
            include_hidden=self.include_hidden,
        )

    def _resolve(self, value: str | Path) -> Path:
        path = Path(value)
        if self.root is not None and not path.is_absolute():
            return self.root / path
        return path


def bust_cache(
    file_name: str,
    directory: str | Path | None = None,
    *,
    root: Path | None = None,
    algorithm: str = DEFAULT_ALGORITHM,
    include_hidden: bool = False,
) -> str:
    """Return ``file_name`` with a content digest appended as a query string.

    Args:
        file_name: Asset reference, e.g. "assets/css/main.css".
        directory: Optional directory whose files are hashed instead.
        root: Base directory for relative paths.
        algorithm: hashlib algorithm name.
        include_hidden: Whether dot-prefixed entries under the directory count.

    Returns:
        String like "assets/css/main.css?5d41402abc4b2a76b9719d911017c592".
    """
    return CacheDigester(
        file_name=file_name,
        directory=directory,
        root=root,
        algorithm=algorithm,
        include_hidden=include_hidden,
    ).digest()
