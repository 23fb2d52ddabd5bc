"""Resolution of command-line path and tag arguments.

Turns the one or two positional arguments given to ``-u`` or ``-d`` into a
validated :class:`PathSpec`. Everything here runs before any network call,
so a malformed invocation never touches the remote release.
"""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from .errors import InvalidArgumentsError, InvalidTagError, PathNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathSpec:
    """Resolved local and remote targets for one invocation."""

    directory: Optional[Path]
    files: list[Path] = field(default_factory=list)
    tag_name: str = ""
    asset_name: str = ""
    forced_file_name: Optional[str] = None


def split_tag(tag: str) -> tuple[str, str]:
    """Split a tag path into tag name and asset name.

    The last ``/``-separated segment names the asset and may be empty.

    Args:
        tag: Tag path such as ``v1/`` or ``jurism/v1/report.txt``

    Returns:
        Tuple of (tag_name, asset_name)

    Raises:
        InvalidTagError: If the tag path has no meaningful tag segment
    """
    tag_name, sep, asset_name = tag.rpartition("/")
    if not sep or not tag_name.strip("/"):
        raise InvalidTagError(
            f'Invalid tag "{tag}". Tag must consist of multiple elements separated by /'
        )
    return tag_name, asset_name


def normalize_path(path: str, allow_missing: bool = False) -> tuple[Path, Optional[str]]:
    """Normalize a filesystem argument.

    A trailing ``/`` demands an existing directory. A missing path without
    one names a file to create inside an existing parent directory.

    Args:
        path: Raw path argument
        allow_missing: Accept a missing file whose parent exists

    Returns:
        Tuple of (existing path, forced file name or None)

    Raises:
        PathNotFoundError: If the path or its parent does not exist
    """
    demands_directory = path.endswith("/") and path != "/"
    if demands_directory:
        path = path.rstrip("/")

    resolved = Path(path)
    if resolved.exists():
        if demands_directory and not resolved.is_dir():
            raise PathNotFoundError(f'Path "{path}" is not a directory')
        return resolved, None

    if demands_directory:
        raise PathNotFoundError(f'Path "{path}" does not exist')

    parent = resolved.parent
    if not parent.is_dir():
        raise PathNotFoundError(f'Parent directory "{parent}" does not exist')
    if not allow_missing:
        raise PathNotFoundError(f'File "{path}" does not exist')
    return parent, resolved.name


def is_ignored(name: str, exclude: Optional[Sequence[str]] = None) -> bool:
    """Tell whether a directory entry is left out of a directory upload."""
    if name.startswith(".") or name.endswith("~"):
        return True
    return any(fnmatch.fnmatch(name, pattern) for pattern in exclude or ())


def collect_files(directory: Path, exclude: Optional[Sequence[str]] = None) -> list[Path]:
    """List the uploadable files of a directory.

    Dotfiles, ``~`` backup files, names matching any exclude glob and
    anything that is not a regular file are skipped.

    Args:
        directory: Directory to list
        exclude: Glob patterns matched against entry names

    Returns:
        Sorted list of file paths
    """
    files = []
    for entry in sorted(directory.iterdir()):
        if is_ignored(entry.name, exclude):
            logger.debug(f"Ignoring {entry}")
            continue
        if not entry.is_file():
            logger.debug(f"Skipping non-file entry {entry}")
            continue
        files.append(entry)
    return files


def resolve_paths(
    arguments: Sequence[str],
    exclude: Optional[Sequence[str]] = None,
    download: bool = False,
) -> PathSpec:
    """Resolve positional arguments into a :class:`PathSpec`.

    With two arguments the filesystem path comes first and the tag path
    second. A single argument must be a ``tag/asset`` path.

    Args:
        arguments: One or two positional arguments
        exclude: Glob patterns excluded from directory uploads
        download: Resolve for a download rather than an upload

    Returns:
        Validated path specification

    Raises:
        InvalidArgumentsError: If the arguments have the wrong shape
        InvalidTagError: If the tag path is malformed
        PathNotFoundError: If a local path does not exist
    """
    if len(arguments) == 1:
        tag_name, asset_name = split_tag(arguments[0])
        if not asset_name:
            raise InvalidArgumentsError(
                "Invalid arguments. Single argument must be a tag path ending in asset name"
            )
        return PathSpec(directory=None, tag_name=tag_name, asset_name=asset_name)

    if len(arguments) != 2:
        raise InvalidArgumentsError(
            f"Invalid arguments. Expected one or two arguments, got {len(arguments)}"
        )

    raw_path, raw_tag = arguments
    tag_name, asset_name = split_tag(raw_tag)
    path, forced_file_name = normalize_path(raw_path, allow_missing=download)

    if path.is_dir():
        if asset_name and not forced_file_name:
            raise InvalidArgumentsError(
                "Invalid arguments. Path to directory needs to have tag/ as target "
                "(i.e. nothing after the slash)"
            )
        return PathSpec(
            directory=path,
            files=[] if download else collect_files(path, exclude),
            tag_name=tag_name,
            asset_name=asset_name,
            forced_file_name=forced_file_name,
        )

    if path.is_file():
        if not asset_name:
            raise InvalidArgumentsError(
                "Invalid arguments. Path to file needs explicit tag/asset as target"
            )
        return PathSpec(
            directory=path.parent,
            files=[path],
            tag_name=tag_name,
            asset_name=asset_name,
        )

    raise PathNotFoundError(f"Path {path} is neither file nor directory")
