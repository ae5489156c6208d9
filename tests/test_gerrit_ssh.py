# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2025 The Linux Foundation
"""
Tests for the Gerrit SSH command runner.

This module tests command line construction, credential checks and the
translation of subprocess failures into ExecutionError.
"""

import subprocess
from unittest.mock import patch

import pytest
from conftest import completed

from gerritreport.errors import ConfigurationError, ExecutionError
from gerritreport.gerrit.models import ConnectionConfig
from gerritreport.gerrit.ssh import GerritSsh


class TestSshArgv:
    """Tests for ssh command line construction."""

    def test_default_port(self, config):
        """Test the command line with the default port."""
        argv = GerritSsh(config).ssh_argv(["version"])

        assert argv == [
            "ssh",
            "-x",
            "-p",
            "29418",
            "jdoe@gerrit.example.org",
            "gerrit",
            "version",
        ]

    def test_custom_port_and_client(self):
        """Test that port and ssh client come from the config."""
        config = ConnectionConfig(
            host_and_user="gerrit.example.org", port=2222, ssh_command="/usr/bin/ssh"
        )

        argv = GerritSsh(config).ssh_argv(["ls-projects"])

        assert argv[:5] == ["/usr/bin/ssh", "-x", "-p", "2222", "gerrit.example.org"]

    def test_credentials_stripped(self):
        """Test that surrounding whitespace is removed from the destination."""
        config = ConnectionConfig(host_and_user="  jdoe@gerrit.example.org\n")

        argv = GerritSsh(config).ssh_argv(["version"])

        assert argv[4] == "jdoe@gerrit.example.org"

    @pytest.mark.parametrize("creds", [None, "", "   "])
    def test_missing_credentials(self, creds):
        """Test that missing credentials raise ConfigurationError."""
        ssh = GerritSsh(ConnectionConfig(host_and_user=creds))

        with pytest.raises(ConfigurationError):
            ssh.ssh_argv(["version"])


class TestRun:
    """Tests for running gerrit commands."""

    @patch("gerritreport.gerrit.ssh.subprocess.run")
    def test_returns_stdout(self, mock_run, config):
        """Test that stdout is returned on success."""
        mock_run.return_value = completed(stdout=b"gerrit version 3.9.1\n")

        assert GerritSsh(config).run(["version"]) == b"gerrit version 3.9.1\n"
        mock_run.assert_called_once()
        kwargs = mock_run.call_args.kwargs
        assert kwargs["capture_output"] is True
        assert kwargs["timeout"] == config.timeout

    @patch("gerritreport.gerrit.ssh.subprocess.run")
    def test_non_zero_exit(self, mock_run, config):
        """Test that a failing command raises with its stderr."""
        mock_run.return_value = completed(
            returncode=255, stderr=b"ssh: connect to host: Connection refused\n"
        )

        with pytest.raises(ExecutionError) as exc_info:
            GerritSsh(config).run(["version"])

        assert exc_info.value.returncode == 255
        assert "Connection refused" in exc_info.value.stderr
        assert "Connection refused" in str(exc_info.value)
        assert exc_info.value.command[0] == "ssh"

    @patch("gerritreport.gerrit.ssh.subprocess.run")
    def test_missing_binary(self, mock_run, config):
        """Test that a missing ssh client raises ExecutionError."""
        mock_run.side_effect = FileNotFoundError("ssh")

        with pytest.raises(ExecutionError, match="SSH client not found"):
            GerritSsh(config).run(["version"])

    @patch("gerritreport.gerrit.ssh.subprocess.run")
    def test_timeout(self, mock_run, config):
        """Test that a timeout raises ExecutionError."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="ssh", timeout=60)

        with pytest.raises(ExecutionError, match="timed out"):
            GerritSsh(config).run(["version"])

    @patch("gerritreport.gerrit.ssh.subprocess.run")
    def test_no_retry(self, mock_run, config):
        """Test that a failure is reported after a single attempt."""
        mock_run.return_value = completed(returncode=1, stderr=b"boom")

        with pytest.raises(ExecutionError):
            GerritSsh(config).run(["version"])

        assert mock_run.call_count == 1

    @patch("gerritreport.gerrit.ssh.subprocess.run")
    def test_missing_credentials_never_runs(self, mock_run):
        """Test that no process is started without credentials."""
        with pytest.raises(ConfigurationError):
            GerritSsh(ConnectionConfig()).query("releng/tool")

        mock_run.assert_not_called()


class TestQuery:
    """Tests for GerritSsh.query."""

    @patch("gerritreport.gerrit.ssh.subprocess.run")
    def test_query_command(self, mock_run, config):
        """Test the query command sent over SSH."""
        mock_run.return_value = completed(stdout=b"{}\n")

        GerritSsh(config).query("releng/tool", "owner:self", "--all-approvals")

        argv = mock_run.call_args.args[0]
        assert argv[5:] == [
            "gerrit",
            "query",
            "--format=JSON",
            "--current-patch-set",
            "project:releng/tool",
            "--all-approvals",
            "owner:self",
        ]

    @patch("gerritreport.gerrit.ssh.subprocess.run")
    def test_query_default_filter(self, mock_run, config):
        """Test that an empty filter queries open changes."""
        mock_run.return_value = completed()

        GerritSsh(config).query("releng/tool")

        assert mock_run.call_args.args[0][-1] == "status:open"
