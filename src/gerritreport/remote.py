# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2025 The Linux Foundation
"""
Connection settings discovery from git remotes.

Gerrit clones usually point at the server's SSH daemon, so the remote URL
already names the SSH user, host, port and project.

Supported remote formats:

    ssh://jdoe@gerrit.example.org:29418/releng/tool.git
    ssh://gerrit.example.org/releng/tool
    jdoe@gerrit.example.org:releng/tool.git
    https://gerrit.example.org/a/releng/tool   (project only)
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from urllib.parse import urlparse

from gerritreport.gerrit.models import DEFAULT_SSH_PORT, ConnectionConfig

log = logging.getLogger("gerritreport.remote")

DEFAULT_REMOTE = "origin"

ENV_CREDS = "GERRIT_SSH_CREDS"
ENV_PORT = "GERRIT_SSH_PORT"
ENV_PROJECT = "GERRIT_PROJECT"
ENV_REMOTE = "GERRIT_REMOTE"

_SCP_PATTERN = re.compile(
    r"^(?:(?P<user>[^@/\s]+)@)?(?P<host>[\w.-]+):(?!//)(?P<path>[^\s]+)$"
)


class RemoteParseError(ValueError):
    """Raised when a remote URL does not identify a Gerrit project."""


@dataclass(frozen=True)
class RemoteInfo:
    """
    Gerrit settings derived from a remote URL.

    Attributes:
        host: The server hostname.
        user: The SSH user, None when the URL does not name one.
        port: The SSH port, None for non-SSH remotes.
        project: The Gerrit project name, without ``.git``.
    """

    host: str
    user: str | None
    port: int | None
    project: str

    @property
    def is_ssh(self) -> bool:
        """Check if the remote is reached over SSH."""
        return self.port is not None

    @property
    def host_and_user(self) -> str:
        """The SSH destination, ``user@host`` or ``host``."""
        return f"{self.user}@{self.host}" if self.user else self.host


def _clean_project(path: str) -> str:
    project = path.strip("/")
    if project.endswith(".git"):
        project = project[: -len(".git")]
    return project.rstrip("/")


def parse_remote_url(url: str) -> RemoteInfo:
    """
    Parse a git remote URL into Gerrit settings.

    Args:
        url: The remote URL.

    Returns:
        A RemoteInfo instance.

    Raises:
        RemoteParseError: If the URL format is not recognized.
    """
    url = url.strip()
    if not url:
        raise RemoteParseError("Remote URL cannot be empty")

    if "://" not in url:
        match = _SCP_PATTERN.match(url)
        if not match:
            raise RemoteParseError(f"Unrecognized remote URL: {url}")
        project = _clean_project(match.group("path"))
        if not project:
            raise RemoteParseError(f"Remote URL has no project: {url}")
        return RemoteInfo(
            host=match.group("host"),
            user=match.group("user"),
            port=DEFAULT_SSH_PORT,
            project=project,
        )

    parsed = urlparse(url)
    if not parsed.hostname:
        raise RemoteParseError(f"Remote URL must include a hostname: {url}")

    project = _clean_project(parsed.path)
    if parsed.scheme in ("ssh", "git+ssh", "ssh+git"):
        port = parsed.port or DEFAULT_SSH_PORT
    elif parsed.scheme in ("http", "https"):
        port = None
        # Authenticated HTTP access lives under /a/
        if project.startswith("a/"):
            project = project[2:]
    else:
        raise RemoteParseError(f"Unsupported remote scheme: {parsed.scheme}")

    if not project:
        raise RemoteParseError(f"Remote URL has no project: {url}")

    return RemoteInfo(
        host=parsed.hostname,
        user=parsed.username,
        port=port,
        project=project,
    )


def get_remote_url(remote: str = DEFAULT_REMOTE) -> str | None:
    """Get the URL of a git remote, None if it cannot be read."""
    try:
        result = subprocess.run(
            ["git", "remote", "get-url", remote],
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip() or None
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None


def resolve_settings(
    remote: str | None = None,
    creds: str | None = None,
    port: int | None = None,
    project: str | None = None,
    timeout: float | None = 60.0,
) -> tuple[ConnectionConfig, str | None]:
    """
    Work out connection settings and the project name.

    Explicit arguments win, then the GERRIT_SSH_CREDS, GERRIT_SSH_PORT and
    GERRIT_PROJECT environment variables, then the git remote URL.

    Args:
        remote: The git remote to inspect; GERRIT_REMOTE or origin.
        creds: SSH destination, ``user@host``.
        port: SSH port.
        project: Gerrit project name.
        timeout: Command timeout for the connection.

    Returns:
        A tuple of the connection settings and the project, which may be
        None when nothing names one.
    """
    creds = (creds or "").strip() or os.getenv(ENV_CREDS, "").strip() or None
    project = (project or "").strip() or os.getenv(ENV_PROJECT, "").strip() or None

    if port is None:
        env_port = os.getenv(ENV_PORT, "").strip()
        if env_port:
            try:
                port = int(env_port)
            except ValueError:
                log.warning("Ignoring invalid %s=%r", ENV_PORT, env_port)

    if creds is None or project is None or port is None:
        remote = remote or os.getenv(ENV_REMOTE, "").strip() or DEFAULT_REMOTE
        url = get_remote_url(remote)
        info: RemoteInfo | None = None
        if url:
            try:
                info = parse_remote_url(url)
            except RemoteParseError as exc:
                log.debug("Remote %s is not usable: %s", remote, exc)
        if info is not None:
            log.debug("Using settings from remote %s: %s", remote, info)
            project = project or info.project
            if info.is_ssh:
                creds = creds or info.host_and_user
                if port is None:
                    port = info.port

    config = ConnectionConfig(
        host_and_user=creds,
        port=port if port is not None else DEFAULT_SSH_PORT,
        timeout=timeout,
    )
    return config, project


__all__ = [
    "DEFAULT_REMOTE",
    "RemoteInfo",
    "RemoteParseError",
    "get_remote_url",
    "parse_remote_url",
    "resolve_settings",
]
