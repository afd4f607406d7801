from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import logging
import sys
from typing import Final, TextIO

from jirae.editor import EditError, edit_text
from jirae.jira_gateway import JiraApplicationError, JiraGateway, JiraGatewayError
from jirae.models import ResolvedTarget, SubmissionOutcome
from jirae.observability import log_event
from jirae.resolver import ResolutionError, parse_reference, resolve
from jirae.submission import confirm_submit


LOGGER = logging.getLogger("jirae.workflow")

EXIT_OK: Final[int] = 0
EXIT_CONFIG: Final[int] = 1
EXIT_RUNTIME: Final[int] = 2

NOT_SUBMITTED_NOTICE: Final[str] = "The text was not submitted. This is the edited text:"


class SubmitError(RuntimeError):
    """A write failed after the user confirmed; wraps the gateway failure."""

    def __init__(self, target: ResolvedTarget, cause: JiraGatewayError) -> None:
        super().__init__(str(cause))
        self.target = target
        self.cause = cause

    @property
    def status(self) -> int | None:
        if isinstance(self.cause, JiraApplicationError):
            return self.cause.status
        return None

    @property
    def body(self) -> str | None:
        if isinstance(self.cause, JiraApplicationError):
            return self.cause.body
        return None


@dataclass(frozen=True)
class EditRequest:
    argument: str
    comment_id: str | None = None
    create_comment: bool = False
    latest_comment: bool = False
    extra_fields: dict[str, object] = field(default_factory=dict)


@dataclass
class EditWorkflow:
    gateway: JiraGateway
    editor_command: str
    base_url: str | None = None
    edit: Callable[..., str] = edit_text
    confirm: Callable[[], bool] = confirm_submit
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    stderr: TextIO = field(default_factory=lambda: sys.stderr)
    outcome: SubmissionOutcome | None = field(default=None, init=False)

    def run(self, request: EditRequest) -> int:
        """Resolve, fetch, edit, confirm and submit; return the process exit code.

        ``ConfigError`` from reference parsing (bare issue key without a base
        URL) is not handled here and propagates to the caller.
        """
        try:
            reference = parse_reference(
                request.argument,
                comment_id=request.comment_id,
                create_comment=request.create_comment,
                latest_comment=request.latest_comment,
                base_url=self.base_url,
            )
            target = resolve(reference, self.gateway)
        except ResolutionError as exc:
            self._report("Could not understand given argument", exc)
            return EXIT_RUNTIME
        except JiraGatewayError as exc:
            self._report("Could not retrieve comments", exc)
            return EXIT_RUNTIME
        log_event(
            LOGGER,
            "target_resolved",
            kind=target.kind,
            issue_key=target.issue_key,
            comment_id=target.comment_id,
        )

        try:
            text = self._fetch(target)
        except JiraGatewayError as exc:
            self._report("Could not retrieve text", exc)
            return EXIT_RUNTIME

        try:
            text = self.edit(text, editor_command=self.editor_command)
        except EditError as exc:
            self._report("Could not get edited text", exc)
            return EXIT_RUNTIME

        try:
            return self._confirm_and_submit(target, text, request.extra_fields)
        except KeyboardInterrupt:
            # The edit is done; never let an interrupt swallow it.
            self.outcome = SubmissionOutcome(submitted=False, text=text)
            self._print_unsubmitted(text)
            raise

    def _confirm_and_submit(
        self, target: ResolvedTarget, text: str, extra_fields: dict[str, object]
    ) -> int:
        if not self.confirm():
            log_event(LOGGER, "submit_declined", kind=target.kind, issue_key=target.issue_key)
            self.outcome = SubmissionOutcome(submitted=False, text=text)
            self._print_unsubmitted(text)
            return EXIT_OK

        try:
            self._submit(target, text, extra_fields)
        except JiraGatewayError as exc:
            error = SubmitError(target, exc)
            self.outcome = SubmissionOutcome(submitted=False, text=text, error=error)
            self._report("Could not submit text", error)
            self._print_unsubmitted(text)
            return EXIT_RUNTIME

        log_event(LOGGER, "submitted", kind=target.kind, issue_key=target.issue_key)
        self.outcome = SubmissionOutcome(submitted=True, text=text)
        return EXIT_OK

    def _fetch(self, target: ResolvedTarget) -> str:
        if target.kind == "issue":
            return self.gateway.fetch_issue_text(target.endpoint)
        if target.kind == "comment":
            return self.gateway.fetch_comment_text(target.endpoint)
        # New comments start empty.
        return ""

    def _submit(
        self, target: ResolvedTarget, text: str, extra_fields: dict[str, object]
    ) -> None:
        if target.kind == "issue":
            self.gateway.update_issue_text(target.endpoint, text)
        elif target.kind == "comment":
            self.gateway.update_comment_text(target.endpoint, text)
        else:
            self.gateway.create_comment(target.endpoint, text, extra_fields)

    def _report(self, prefix: str, exc: Exception) -> None:
        print(f"{prefix}: {exc}", file=self.stderr)

    def _print_unsubmitted(self, text: str) -> None:
        print(NOT_SUBMITTED_NOTICE, file=self.stdout)
        print(text, file=self.stdout)
