"""GitHub release API client.

This module provides the release and asset operations deployer needs,
behind a small protocol so the sync logic can run against a test double.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Optional, Protocol
from urllib.parse import quote

import requests
from typing_extensions import TypedDict

from . import __version__
from .config import DeployerConfig
from .errors import RemoteAPIError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class Asset(TypedDict):
    """A named binary blob attached to a release."""

    id: int
    name: str
    download_url: str


class Release(TypedDict):
    """A tag-addressed container of assets."""

    id: int
    tag_name: str
    upload_url: str
    assets: list[Asset]


class ReleaseClient(Protocol):
    """Remote operations needed to synchronize release assets."""

    def check_access(self) -> None:
        ...

    def get_or_create_release(self, tag: str) -> Release:
        ...

    def upload_asset(
        self,
        release: Release,
        stream: BinaryIO,
        size: int,
        name: str,
        content_type: Optional[str] = None,
    ) -> bool:
        ...

    def delete_asset(self, asset_id: int) -> None:
        ...

    def download_asset(self, url: str) -> bytes:
        ...


class GitHubReleaseClient:
    """Client for the releases of one GitHub repository.

    Authenticates with a token when one is configured, otherwise with
    username and password when those are set.
    """

    API_URL = "https://api.github.com"

    def __init__(self, config: DeployerConfig):
        """Initialize the client.

        Args:
            config: Loaded deployer configuration
        """
        self.owner = config["owner"]
        self.repo = config["repo"]
        self.timeout = config["timeout"]
        self.session = requests.Session()

        self.session.headers.update(
            {
                "User-Agent": f"deployer/{__version__}",
                "Accept": "application/vnd.github+json",
            }
        )

        if config["access"]:
            self.session.headers.update({"Authorization": f"token {config['access']}"})
            logger.debug("GitHub token configured")
        elif config["username"] and config["password"]:
            self.session.auth = (config["username"], config["password"])
            logger.debug("GitHub basic auth configured")

    @property
    def repo_url(self) -> str:
        """API URL of the configured repository."""
        return f"{self.API_URL}/repos/{self.owner}/{self.repo}"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        """Send a request and raise RemoteAPIError on any failure."""
        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            body: object
            try:
                body = e.response.json()
            except ValueError:
                body = e.response.text
            raise RemoteAPIError(
                f"{method} {url} failed: {e}",
                status_code=e.response.status_code,
                response_body=body,
            ) from e
        except requests.exceptions.RequestException as e:
            raise RemoteAPIError(f"{method} {url} failed: {e}") from e
        return response

    def _json(self, response: requests.Response) -> dict:
        try:
            return response.json()
        except ValueError as e:
            raise RemoteAPIError(
                f"Unparseable response from {response.url}",
                status_code=response.status_code,
                response_body=response.text,
            ) from e

    def check_access(self) -> None:
        """Validate the configured credentials.

        Raises:
            RemoteAPIError: If GitHub rejects the credentials
        """
        self._request("GET", f"{self.API_URL}/user")

    def get_or_create_release(self, tag: str) -> Release:
        """Look up the release for a tag, creating it when absent.

        Args:
            tag: Tag name of the release

        Returns:
            The release with its current asset list

        Raises:
            RemoteAPIError: If the lookup or creation fails
        """
        try:
            response = self._request(
                "GET", f"{self.repo_url}/releases/tags/{quote(tag, safe='')}"
            )
            logger.info(f"Release {tag} already exists, reusing")
        except RemoteAPIError as e:
            if e.status_code != 404:
                raise
            logger.info(f"Release {tag} does not yet exist, creating")
            response = self._request(
                "POST", f"{self.repo_url}/releases", json={"tag_name": tag}
            )

        data = self._json(response)
        try:
            return {
                "id": data["id"],
                "tag_name": data.get("tag_name", tag),
                "upload_url": data["upload_url"],
                "assets": [
                    {
                        "id": asset["id"],
                        "name": asset["name"],
                        "download_url": asset["browser_download_url"],
                    }
                    for asset in data.get("assets", [])
                ],
            }
        except (KeyError, TypeError) as e:
            raise RemoteAPIError(
                f"Unexpected release payload for {tag}: missing {e}",
                status_code=response.status_code,
                response_body=data,
            ) from e

    def upload_asset(
        self,
        release: Release,
        stream: BinaryIO,
        size: int,
        name: str,
        content_type: Optional[str] = None,
    ) -> bool:
        """Stream a file as a release asset.

        Zero-length content is skipped without contacting GitHub.

        Args:
            release: Target release
            stream: Open binary file positioned at the asset content
            size: Number of bytes to send
            name: Asset name
            content_type: MIME type, defaults to application/octet-stream

        Returns:
            True if the asset was uploaded, False if it was skipped
        """
        if not size:
            logger.info(f"Skipping empty asset {name}")
            return False

        # upload_url is a URI template like .../assets{?name,label}
        upload_url = release["upload_url"].split("{", 1)[0]
        logger.info(f"Uploading {name} ({size} bytes)")
        self._request(
            "POST",
            upload_url,
            params={"name": name},
            data=stream,
            headers={
                "Content-Type": content_type or DEFAULT_CONTENT_TYPE,
                "Content-Length": str(size),
            },
        )
        return True

    def delete_asset(self, asset_id: int) -> None:
        """Delete a release asset by id."""
        self._request("DELETE", f"{self.repo_url}/releases/assets/{asset_id}")

    def download_asset(self, url: str) -> bytes:
        """Fetch the content of an asset."""
        logger.info(f"Call URL: {url}")
        response = self._request(
            "GET", url, headers={"Accept": DEFAULT_CONTENT_TYPE}
        )
        return response.content

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()

    def __enter__(self) -> GitHubReleaseClient:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
