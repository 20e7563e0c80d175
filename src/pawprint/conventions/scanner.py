"""Directory scanner — lists the files of a convention directory.

Pure and synchronous. Nothing is cached: every call walks the tree again,
which keeps generated modules consistent with the filesystem at the time
the scan ran.

Order is explicit so generated output is identical across platforms:
within a directory, entries are sorted by name (code point order) with
files before sub-directories, and sub-directories are descended depth-first
(pre-order) when ``recursive`` is set.
"""

from __future__ import annotations

import errno
import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath


@dataclass(frozen=True, slots=True)
class FileEntry:
    """A file or directory found by ``scan()``.

    Attributes:
        absolute_path: Absolute filesystem path.
        relative_path: Path relative to the scanned directory (POSIX form).
        is_directory: True for directories.

    """

    absolute_path: Path
    relative_path: PurePosixPath
    is_directory: bool

    @property
    def name(self) -> str:
        return self.relative_path.name


def scan(directory: Path, *, recursive: bool = False) -> tuple[FileEntry, ...]:
    """List the contents of *directory* in a deterministic order.

    Symlinked directories are followed, except when their real path is
    already on the current descent path; such cycles are skipped.

    Raises:
        FileNotFoundError: If *directory* does not exist or is not a directory.

    """
    if not directory.is_dir():
        raise FileNotFoundError(errno.ENOENT, "No such directory", str(directory))

    entries: list[FileEntry] = []
    _walk(
        directory,
        PurePosixPath(),
        recursive,
        (os.path.realpath(directory),),
        entries,
    )
    return tuple(entries)


def _walk(
    directory: Path,
    prefix: PurePosixPath,
    recursive: bool,
    ancestors: tuple[str, ...],
    out: list[FileEntry],
) -> None:
    files: list[os.DirEntry[str]] = []
    dirs: list[os.DirEntry[str]] = []
    with os.scandir(directory) as it:
        for item in it:
            if item.is_dir():
                dirs.append(item)
            else:
                files.append(item)

    for item in sorted(files, key=lambda e: e.name):
        out.append(FileEntry(Path(item.path), prefix / item.name, False))

    for item in sorted(dirs, key=lambda e: e.name):
        real = os.path.realpath(item.path)
        if real in ancestors:
            continue
        relative = prefix / item.name
        out.append(FileEntry(Path(item.path), relative, True))
        if recursive:
            _walk(Path(item.path), relative, recursive, (*ancestors, real), out)


def subdirectories(directory: Path) -> tuple[Path, ...]:
    """Return *directory* and every directory below it, in scan order.

    Returns an empty tuple when *directory* does not exist.
    """
    try:
        entries = scan(directory, recursive=True)
    except FileNotFoundError:
        return ()
    return (directory, *(e.absolute_path for e in entries if e.is_directory))
