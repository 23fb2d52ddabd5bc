"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import BinaryIO, Optional

import pytest

from deployer.config import DeployerConfig
from deployer.github import Release


class FakeReleaseClient:
    """In-memory ReleaseClient recording every call."""

    def __init__(self) -> None:
        self.releases: dict[str, Release] = {}
        self.contents: dict[str, bytes] = {}
        self.calls: list[tuple] = []
        self._next_id = 1

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def add_asset(self, tag: str, name: str, data: bytes) -> None:
        """Seed an asset without recording a call."""
        release = self._release(tag)
        url = f"https://example.test/{tag}/{name}"
        release["assets"].append({"id": self._new_id(), "name": name, "download_url": url})
        self.contents[url] = data

    def _release(self, tag: str) -> Release:
        if tag not in self.releases:
            self.releases[tag] = {
                "id": self._new_id(),
                "tag_name": tag,
                "upload_url": f"https://uploads.example.test/{tag}/assets{{?name,label}}",
                "assets": [],
            }
        return self.releases[tag]

    def check_access(self) -> None:
        self.calls.append(("check_access",))

    def get_or_create_release(self, tag: str) -> Release:
        self.calls.append(("get_or_create_release", tag))
        release = self._release(tag)
        return {**release, "assets": list(release["assets"])}

    def upload_asset(
        self,
        release: Release,
        stream: BinaryIO,
        size: int,
        name: str,
        content_type: Optional[str] = None,
    ) -> bool:
        self.calls.append(("upload_asset", release["tag_name"], name, content_type))
        if not size:
            return False
        data = stream.read()
        assert len(data) == size
        self.add_asset(release["tag_name"], name, data)
        return True

    def delete_asset(self, asset_id: int) -> None:
        self.calls.append(("delete_asset", asset_id))
        for release in self.releases.values():
            release["assets"] = [a for a in release["assets"] if a["id"] != asset_id]

    def download_asset(self, url: str) -> bytes:
        self.calls.append(("download_asset", url))
        return self.contents[url]

    def asset_names(self, tag: str) -> list[str]:
        return [a["name"] for a in self.releases[tag]["assets"]]


@pytest.fixture
def config() -> DeployerConfig:
    """Return a configuration with a test token."""
    return {
        "access": "ghp_test_token",
        "username": None,
        "password": None,
        "quiet": False,
        "owner": "owner",
        "repo": "assets",
        "timeout": None,
    }


@pytest.fixture
def fake_client() -> FakeReleaseClient:
    """Return an empty in-memory release client."""
    return FakeReleaseClient()
