"""Upload and download flows for deployer.

This module sequences the resolved paths through the release client:
one release lookup, then asset deletes, uploads or downloads, strictly
one after another. Any failure aborts the whole run.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Optional, Sequence

from .config import DeployerConfig
from .errors import RemoteAPIError
from .github import GitHubReleaseClient, ReleaseClient
from .paths import PathSpec, resolve_paths

logger = logging.getLogger(__name__)


class SyncResult:
    """Result of an upload or download run.

    Records which assets were transferred, deleted or skipped.
    """

    def __init__(self):
        """Initialize empty sync result."""
        self.uploaded: list[str] = []
        self.downloaded: list[str] = []
        self.deleted: list[str] = []
        self.skipped: list[str] = []
        self.total_bytes = 0

    def add_upload(self, name: str, size_bytes: int) -> None:
        """Record an uploaded asset."""
        self.uploaded.append(name)
        self.total_bytes += size_bytes

    def add_download(self, name: str, size_bytes: int) -> None:
        """Record a downloaded asset."""
        self.downloaded.append(name)
        self.total_bytes += size_bytes

    @property
    def transfer_count(self) -> int:
        """Number of assets uploaded or downloaded."""
        return len(self.uploaded) + len(self.downloaded)

    def __str__(self) -> str:
        """String representation of sync results."""
        return (
            f"{len(self.uploaded)} uploaded, {len(self.downloaded)} downloaded, "
            f"{len(self.deleted)} replaced, {len(self.skipped)} skipped, "
            f"{self.total_bytes} bytes transferred"
        )


class ReleaseSync:
    """Synchronizes local files with the assets of a release.

    Uses an injected :class:`ReleaseClient`, or builds and owns a
    :class:`GitHubReleaseClient` from the configuration.
    """

    def __init__(
        self,
        config: DeployerConfig,
        client: Optional[ReleaseClient] = None,
    ):
        """Initialize the synchronizer.

        Args:
            config: Loaded deployer configuration
            client: Optional release client, mainly for tests
        """
        self.config = config
        self.client: ReleaseClient = client or GitHubReleaseClient(config)
        self._owns_client = client is None

    def check_access(self) -> bool:
        """Check that the configured credentials are accepted.

        Returns:
            True if GitHub accepted the credentials
        """
        try:
            self.client.check_access()
        except RemoteAPIError as e:
            logger.error(f"deployer: Something went wrong with authorization: {e}")
            return False
        logger.info("deployer: repo access OK")
        return True

    def upload(
        self,
        arguments: Sequence[str],
        exclude: Optional[Sequence[str]] = None,
        content_type: Optional[str] = None,
    ) -> SyncResult:
        """Upload files to the release named by the tag argument.

        Existing assets sharing a target name are deleted first, so the
        release never ends up with duplicate names.

        Args:
            arguments: ``[path, tag]`` as given on the command line
            exclude: Glob patterns excluded from directory uploads
            content_type: MIME type for the uploaded assets

        Returns:
            Result of the upload

        Example:
            >>> with ReleaseSync(config) as sync:
            ...     result = sync.upload(["dist/", "jurism/v1/"])
            >>> print(result.uploaded)
            ['jurism.xpi', 'updates.json']
        """
        spec = resolve_paths(arguments, exclude)
        result = SyncResult()

        targets = self._upload_targets(spec)
        release = self.client.get_or_create_release(spec.tag_name)

        target_names = {name for _, name in targets}
        for asset in release["assets"]:
            if asset["name"] not in target_names:
                continue
            logger.info(f"Removing existing asset {asset['name']}")
            self.client.delete_asset(asset["id"])
            result.deleted.append(asset["name"])

        for file_path, name in targets:
            size = file_path.stat().st_size
            if not size:
                logger.info(f"Skipping empty file {file_path}")
                result.skipped.append(name)
                continue
            with file_path.open("rb") as f:
                uploaded = self.client.upload_asset(release, f, size, name, content_type)
            if uploaded:
                result.add_upload(name, size)
            else:
                result.skipped.append(name)

        logger.info(f"Upload to {spec.tag_name} done: {result}")
        return result

    def _upload_targets(self, spec: PathSpec) -> list[tuple[Path, str]]:
        # A single file goes up under its explicit asset name
        if spec.asset_name:
            return [(spec.files[0], spec.asset_name)]
        return [(file_path, file_path.name) for file_path in spec.files]

    def download(
        self,
        arguments: Sequence[str],
        stream: Optional[BinaryIO] = None,
    ) -> SyncResult:
        """Download assets of the release named by the tag argument.

        With ``[path, tag]`` assets are written into the resolved
        directory. With a single ``tag/asset`` argument the asset content
        is written to ``stream``.

        Args:
            arguments: ``[tag/asset]`` or ``[path, tag]``
            stream: Binary stream receiving single-argument downloads

        Returns:
            Result of the download
        """
        spec = resolve_paths(arguments, download=True)
        result = SyncResult()
        release = self.client.get_or_create_release(spec.tag_name)

        forced = spec.forced_file_name if spec.asset_name else None
        wrote_forced = False

        for asset in release["assets"]:
            if spec.asset_name and asset["name"] != spec.asset_name:
                continue

            content = self.client.download_asset(asset["download_url"])

            if spec.directory is None:
                if stream is not None:
                    stream.write(content)
                    stream.flush()
                result.add_download(asset["name"], len(content))
                break

            target = spec.directory / (forced or asset["name"])
            target.write_bytes(content)
            wrote_forced = wrote_forced or forced is not None
            logger.info(f"Saved {asset['name']} to {target}")
            result.add_download(asset["name"], len(content))

        if spec.directory is not None and forced and not wrote_forced:
            target = spec.directory / forced
            logger.warning(
                f"Asset {spec.asset_name} not found in {spec.tag_name}, writing empty {target}"
            )
            target.write_bytes(b"")

        logger.info(f"Download from {spec.tag_name} done: {result}")
        return result

    def close(self) -> None:
        """Clean up resources.

        Should be called when done using the synchronizer.
        """
        if self._owns_client:
            self.client.close()  # type: ignore[attr-defined]

    def __enter__(self) -> ReleaseSync:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
