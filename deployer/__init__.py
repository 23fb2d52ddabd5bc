"""Deployer - GitHub release asset uploader/downloader.

This package synchronizes local files with the assets attached to tagged
releases of a single GitHub repository.
"""

__version__ = "1.0.0"

from .config import DeployerConfig, load_config  # noqa: E402
from .errors import (  # noqa: E402
    DeployerError,
    InvalidArgumentsError,
    InvalidTagError,
    PathNotFoundError,
    RemoteAPIError,
)
from .github import GitHubReleaseClient, ReleaseClient  # noqa: E402
from .paths import PathSpec, resolve_paths  # noqa: E402
from .sync import ReleaseSync, SyncResult  # noqa: E402

__all__ = [
    "DeployerConfig",
    "load_config",
    "DeployerError",
    "InvalidArgumentsError",
    "InvalidTagError",
    "PathNotFoundError",
    "RemoteAPIError",
    "GitHubReleaseClient",
    "ReleaseClient",
    "PathSpec",
    "resolve_paths",
    "ReleaseSync",
    "SyncResult",
]
