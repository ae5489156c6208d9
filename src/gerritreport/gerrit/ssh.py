# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2025 The Linux Foundation
"""
Gerrit SSH command runner.

This module runs commands against Gerrit's SSH interface by shelling out
to the ``ssh`` client:

    ssh -x -p 29418 jdoe@gerrit.example.org gerrit <command> <args...>

Each call is a single attempt. A missing binary, a timeout or a non-zero
exit status is reported immediately as an ExecutionError carrying the
captured stderr.

Usage:
    from gerritreport.gerrit.ssh import GerritSsh
    from gerritreport.gerrit.models import ConnectionConfig

    ssh = GerritSsh(ConnectionConfig(host_and_user="jdoe@gerrit.example.org"))
    raw = ssh.query("releng/tool", "status:open")
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence

from gerritreport.errors import ConfigurationError, ExecutionError
from gerritreport.gerrit.commands import build_query_command
from gerritreport.gerrit.models import ConnectionConfig

log = logging.getLogger("gerritreport.gerrit.ssh")

_MSG_MISSING_CREDS = (
    "Gerrit SSH credentials are not set; pass --creds, set GERRIT_SSH_CREDS "
    "or configure a Gerrit remote"
)


class GerritSsh:
    """Runs ``gerrit`` commands over SSH."""

    def __init__(self, config: ConnectionConfig) -> None:
        self._config = config

    @property
    def config(self) -> ConnectionConfig:
        """Get the connection settings."""
        return self._config

    def ssh_argv(self, gerrit_args: Sequence[str]) -> list[str]:
        """
        Build the full ssh command line for a gerrit command.

        Raises:
            ConfigurationError: If no credentials are configured.
        """
        host = (self._config.host_and_user or "").strip()
        if not host:
            raise ConfigurationError(_MSG_MISSING_CREDS)
        return [
            self._config.ssh_command,
            "-x",
            "-p",
            str(self._config.port),
            host,
            "gerrit",
            *gerrit_args,
        ]

    def run(self, gerrit_args: Sequence[str]) -> bytes:
        """
        Run a gerrit command and return its standard output.

        Args:
            gerrit_args: Arguments following ``gerrit``.

        Returns:
            The raw stdout bytes.

        Raises:
            ConfigurationError: If no credentials are configured.
            ExecutionError: If the command cannot be started, times out
                or exits non-zero.
        """
        argv = self.ssh_argv(gerrit_args)
        log.debug("Running: %s", shlex.join(argv))

        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                timeout=self._config.timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise ExecutionError(
                f"SSH client not found: {self._config.ssh_command}",
                command=argv,
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise ExecutionError(
                f"Gerrit command timed out after {self._config.timeout}s",
                stderr=_decode(exc.stderr),
                command=argv,
            ) from exc
        except OSError as exc:
            raise ExecutionError(
                f"Failed to start SSH client: {exc}", command=argv
            ) from exc

        if result.returncode != 0:
            stderr = _decode(result.stderr)
            log.debug(
                "Gerrit command failed (exit %d): %s", result.returncode, stderr
            )
            raise ExecutionError(
                f"Gerrit command failed with exit status {result.returncode}",
                returncode=result.returncode,
                stderr=stderr,
                command=argv,
            )
        return result.stdout

    def query(
        self,
        project: str,
        filter: str | None = None,
        extra_options: str | None = None,
    ) -> bytes:
        """
        Run ``gerrit query`` for a project and return the JSON lines.

        Raises:
            ConfigurationError: If no credentials are configured.
            ExecutionError: If the query fails.
        """
        return self.run(build_query_command(project, filter, extra_options))

    def __repr__(self) -> str:
        return (
            f"GerritSsh(host_and_user={self._config.host_and_user!r}, "
            f"port={self._config.port})"
        )


def _decode(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


__all__ = ["GerritSsh"]
