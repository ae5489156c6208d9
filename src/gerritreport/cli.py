# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2025 The Linux Foundation

import logging
import os
import webbrowser
from typing import List, NoReturn, Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from typer.core import TyperGroup

from . import __version__
from .errors import GerritReportError
from .gerrit.models import ConnectionConfig, LabelSet, Review
from .gerrit.service import ReviewService, generate_report_text
from .git import current_branch, fetch_review, push_for_review, upstream_branch
from .remote import DEFAULT_REMOTE, ENV_REMOTE, resolve_settings

ENV_LABELS = "GERRIT_LABELS"


class DefaultCommandGroup(TyperGroup):
    def __init__(self, *args, default="list", **kwargs):
        super().__init__(*args, **kwargs)
        self.default_command_name = default

    def parse_args(self, ctx, args):
        # Global options are all flags; skip past them, then run the default
        # command unless a known subcommand name follows.
        global_opts = set(ctx.help_option_names)
        for param in self.get_params(ctx):
            global_opts.update(param.opts)
            global_opts.update(param.secondary_opts)
        index = 0
        while index < len(args) and args[index] in global_opts:
            index += 1
        if self.default_command_name and (
            index == len(args) or self.get_command(ctx, args[index]) is None
        ):
            args.insert(index, self.default_command_name)
        return super().parse_args(ctx, args)


app = typer.Typer(
    cls=DefaultCommandGroup,
    help="List Gerrit reviews for a repository and act on them over SSH",
)
console = Console(markup=False)

# Allows negative scores such as "-1" to be passed as arguments
SCORE_CONTEXT = {"ignore_unknown_options": True}

RemoteOption = typer.Option(
    None, "--remote", help=f"Git remote pointing at Gerrit (or set {ENV_REMOTE})"
)
CredsOption = typer.Option(
    None, "--creds", help="SSH destination user@host (or set GERRIT_SSH_CREDS)"
)
PortOption = typer.Option(
    None, "--port", help="Gerrit SSH port (or set GERRIT_SSH_PORT)"
)
ProjectOption = typer.Option(
    None, "--project", help="Gerrit project (or set GERRIT_PROJECT)"
)
MessageOption = typer.Option(None, "--message", "-m", help="Review message")
LabelsOption = typer.Option(
    None,
    "--labels",
    help="Labels and score ranges, e.g. Code-Review=CR:-2:2,Verified=VR:-1:1 "
    f"(or set {ENV_LABELS})",
)


def _version_callback(value: bool):
    if value:
        console.print(f"gerrit-review version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log SSH and git commands"
    ),
):
    """List Gerrit reviews for a repository and act on them over SSH."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


def _fail(message: str) -> NoReturn:
    console.print(f"Error: {message}", soft_wrap=True)
    raise typer.Exit(1)


def _settings(
    remote: Optional[str],
    creds: Optional[str],
    port: Optional[int],
    project: Optional[str],
) -> Tuple[ConnectionConfig, str]:
    config, resolved_project = resolve_settings(remote, creds, port, project)
    if not resolved_project:
        _fail("Could not determine the Gerrit project; pass --project")
    return config, resolved_project


def _labels(labels: Optional[str]) -> LabelSet:
    label_config = labels or os.getenv(ENV_LABELS, "")
    if not label_config.strip():
        return LabelSet.default()
    try:
        return LabelSet.parse(label_config)
    except ValueError as e:
        _fail(f"Invalid label configuration: {e}")


def _lookup(
    number: int,
    remote: Optional[str],
    creds: Optional[str],
    port: Optional[int],
    project: Optional[str],
    labels: Optional[LabelSet] = None,
) -> Tuple[ReviewService, Review]:
    config, resolved_project = _settings(remote, creds, port, project)
    service = ReviewService(config, resolved_project, labels)
    return service, service.get_review(number)


def _print_output(output: str) -> None:
    if output.strip():
        console.print(output.rstrip())


@app.command("list")
def list_reviews(
    filter: Optional[str] = typer.Option(
        None, "--filter", "-f", help="Gerrit search operators (default status:open)"
    ),
    width: Optional[int] = typer.Option(
        None, "--width", "-w", help="Table width (default: terminal width)"
    ),
    labels: Optional[str] = LabelsOption,
    title: Optional[str] = typer.Option(None, "--title", help="Table title"),
    query_options: Optional[str] = typer.Option(
        None, "--query-options", help="Extra gerrit query options"
    ),
    remote: Optional[str] = RemoteOption,
    creds: Optional[str] = CredsOption,
    port: Optional[int] = PortOption,
    project: Optional[str] = ProjectOption,
):
    """
    List reviews for the project as a table.

    Columns are added as the width grows: scores above 80 columns, change
    size above 94, age above 108 and target branch above 128.
    """
    config, resolved_project = _settings(remote, creds, port, project)
    label_set = _labels(labels)
    try:
        report = generate_report_text(
            resolved_project,
            filter,
            width or console.width,
            config=config,
            labels=label_set,
            title=title,
            extra_options=query_options,
        )
    except GerritReportError as e:
        _fail(str(e))
    console.print(report, end="", soft_wrap=True, highlight=False)


@app.command("code-review", context_settings=SCORE_CONTEXT)
def code_review(
    number: int = typer.Argument(..., help="Change number"),
    score: int = typer.Argument(..., help="Code-Review score, -2 to 2"),
    message: Optional[str] = MessageOption,
    labels: Optional[str] = LabelsOption,
    remote: Optional[str] = RemoteOption,
    creds: Optional[str] = CredsOption,
    port: Optional[int] = PortOption,
    project: Optional[str] = ProjectOption,
):
    """Score the current patchset of a change on Code-Review."""
    label_set = _labels(labels)
    try:
        service, review = _lookup(
            number, remote, creds, port, project, label_set
        )
        _print_output(service.code_review(review, score, message))
    except (GerritReportError, ValueError) as e:
        _fail(str(e))
    console.print(f"Code-Review {score:+d} on {review.change_patchset} ✅")


@app.command("verify", context_settings=SCORE_CONTEXT)
def verify(
    number: int = typer.Argument(..., help="Change number"),
    score: int = typer.Argument(..., help="Verified score, -1 to 1"),
    message: Optional[str] = MessageOption,
    labels: Optional[str] = LabelsOption,
    remote: Optional[str] = RemoteOption,
    creds: Optional[str] = CredsOption,
    port: Optional[int] = PortOption,
    project: Optional[str] = ProjectOption,
):
    """Score the current patchset of a change on Verified."""
    label_set = _labels(labels)
    try:
        service, review = _lookup(
            number, remote, creds, port, project, label_set
        )
        _print_output(service.verify(review, score, message))
    except (GerritReportError, ValueError) as e:
        _fail(str(e))
    console.print(f"Verified {score:+d} on {review.change_patchset} ✅")


@app.command()
def submit(
    number: int = typer.Argument(..., help="Change number"),
    message: Optional[str] = MessageOption,
    remote: Optional[str] = RemoteOption,
    creds: Optional[str] = CredsOption,
    port: Optional[int] = PortOption,
    project: Optional[str] = ProjectOption,
):
    """Submit the current patchset of a change."""
    try:
        service, review = _lookup(number, remote, creds, port, project)
        _print_output(service.submit(review, message))
    except GerritReportError as e:
        _fail(str(e))
    console.print(f"Submitted {review.change_patchset} ✅")


@app.command()
def abandon(
    number: int = typer.Argument(..., help="Change number"),
    message: Optional[str] = MessageOption,
    remote: Optional[str] = RemoteOption,
    creds: Optional[str] = CredsOption,
    port: Optional[int] = PortOption,
    project: Optional[str] = ProjectOption,
):
    """Abandon a change."""
    try:
        service, review = _lookup(number, remote, creds, port, project)
        _print_output(service.abandon(review, message))
    except GerritReportError as e:
        _fail(str(e))
    console.print(f"Abandoned {review.number}")


@app.command()
def publish(
    number: int = typer.Argument(..., help="Change number"),
    remote: Optional[str] = RemoteOption,
    creds: Optional[str] = CredsOption,
    port: Optional[int] = PortOption,
    project: Optional[str] = ProjectOption,
):
    """Publish the draft patchset of a change."""
    try:
        service, review = _lookup(number, remote, creds, port, project)
        _print_output(service.publish(review))
    except GerritReportError as e:
        _fail(str(e))
    console.print(f"Published {review.change_patchset}")


@app.command("delete-draft")
def delete_draft(
    number: int = typer.Argument(..., help="Change number"),
    remote: Optional[str] = RemoteOption,
    creds: Optional[str] = CredsOption,
    port: Optional[int] = PortOption,
    project: Optional[str] = ProjectOption,
):
    """Delete the draft patchset of a change."""
    try:
        service, review = _lookup(number, remote, creds, port, project)
        _print_output(service.delete_draft(review))
    except GerritReportError as e:
        _fail(str(e))
    console.print(f"Deleted draft {review.change_patchset}")


@app.command("add-reviewer")
def add_reviewer(
    number: int = typer.Argument(..., help="Change number"),
    reviewers: List[str] = typer.Argument(..., help="Reviewer usernames or emails"),
    remote: Optional[str] = RemoteOption,
    creds: Optional[str] = CredsOption,
    port: Optional[int] = PortOption,
    project: Optional[str] = ProjectOption,
):
    """Add reviewers to a change."""
    try:
        service, review = _lookup(number, remote, creds, port, project)
        _print_output(service.add_reviewers(review, reviewers))
    except (GerritReportError, ValueError) as e:
        _fail(str(e))
    console.print(f"Added {', '.join(reviewers)} to {review.number}")


@app.command()
def browse(
    number: int = typer.Argument(..., help="Change number"),
    open_browser: bool = typer.Option(
        False, "--open", help="Open the change in a web browser"
    ),
    remote: Optional[str] = RemoteOption,
    creds: Optional[str] = CredsOption,
    port: Optional[int] = PortOption,
    project: Optional[str] = ProjectOption,
):
    """Show the web URL of a change."""
    try:
        _, review = _lookup(number, remote, creds, port, project)
    except GerritReportError as e:
        _fail(str(e))
    if not review.url:
        _fail(f"Gerrit did not report a URL for change {number}")
    console.print(review.url)
    if open_browser:
        webbrowser.open(review.url)


@app.command()
def push(
    revision: str = typer.Argument("HEAD", help="Commit to upload"),
    branch: Optional[str] = typer.Option(
        None, "--branch", "-b", help="Target branch (default: upstream branch)"
    ),
    draft: bool = typer.Option(False, "--draft", help="Upload as a draft"),
    remote: Optional[str] = RemoteOption,
):
    """Push a commit to Gerrit for review."""
    remote = remote or os.getenv(ENV_REMOTE, "").strip() or DEFAULT_REMOTE
    if branch is None:
        local = current_branch()
        if local is None:
            _fail("HEAD is detached; pass --branch")
        branch = upstream_branch(local)
        if branch is None:
            _fail(f"Branch {local} has no upstream; pass --branch")
    try:
        output = push_for_review(remote, revision, branch, draft=draft)
    except (GerritReportError, ValueError) as e:
        _fail(str(e))
    _print_output(output)
    kind = "drafts" if draft else "for"
    console.print(f"Pushed {revision} to {remote} refs/{kind}/{branch} ✅")


@app.command()
def fetch(
    number: int = typer.Argument(..., help="Change number"),
    remote: Optional[str] = RemoteOption,
    creds: Optional[str] = CredsOption,
    port: Optional[int] = PortOption,
    project: Optional[str] = ProjectOption,
):
    """Fetch the current patchset of a change into FETCH_HEAD."""
    git_remote = remote or os.getenv(ENV_REMOTE, "").strip() or DEFAULT_REMOTE
    try:
        _, review = _lookup(number, remote, creds, port, project)
        if not review.ref:
            _fail(f"Gerrit did not report a ref for change {number}")
        commit = fetch_review(git_remote, review.ref)
    except (GerritReportError, ValueError) as e:
        _fail(str(e))
    console.print(f"Fetched {review.ref} as FETCH_HEAD ({commit[:12]})")


if __name__ == "__main__":
    app()
