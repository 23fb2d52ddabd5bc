"""Exception hierarchy for deployer.

Every error raised here is terminal: the CLI logs it and exits non-zero.
"""

from __future__ import annotations


class DeployerError(Exception):
    """Base exception for all deployer failures."""


class InvalidArgumentsError(DeployerError):
    """Command-line arguments have the wrong shape."""


class PathNotFoundError(DeployerError):
    """A local file, directory or parent directory does not exist."""


class InvalidTagError(DeployerError):
    """A tag path is malformed."""


class RemoteAPIError(DeployerError):
    """A call to the GitHub API failed.

    Attributes:
        status_code: HTTP status code, 0 when no response was received.
        response_body: Raw response body (str or dict).
    """

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        response_body: object = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
