"""Turn the user's command-line reference into a Jira REST endpoint.

A reference is parsed once into one of the variants in ``jirae.models``
(comment permalink, issue permalink, issue key with optional comment id,
new-comment request, latest-comment request) and then resolved into a
``ResolvedTarget``. Only the latest-comment variant needs the network.
"""

from __future__ import annotations

import logging
import re
from typing import Literal, Protocol
from urllib.parse import parse_qs, urlsplit

from jirae.config import BASE_URL_ENV, ConfigError
from jirae.models import (
    Comment,
    CommentPermalink,
    CreateCommentRequest,
    IssueAndCommentId,
    IssuePermalink,
    LatestCommentRequest,
    ResolvedTarget,
    ResourceReference,
)
from jirae.observability import log_event


LOGGER = logging.getLogger("jirae.resolver")
ResolutionReason = Literal["invalid_reference", "no_comments_found"]

_BROWSE_PATH_RE = re.compile(r"^(?P<context>.*?)/browse/(?P<key>[^/?#]+)/?$")
_ISSUE_KEY_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*-[0-9]+$")
_COMMENT_ID_RE = re.compile(r"^[0-9]+$")
_FOCUSED_COMMENT_PARAM = "focusedCommentId"


class ResolutionError(RuntimeError):
    def __init__(self, message: str, *, reason: ResolutionReason) -> None:
        super().__init__(message)
        self.reason = reason


class CommentLister(Protocol):
    def list_comments(self, endpoint: str) -> tuple[Comment, ...]: ...


def parse_reference(
    argument: str,
    *,
    comment_id: str | None = None,
    create_comment: bool = False,
    latest_comment: bool = False,
    base_url: str | None = None,
) -> ResourceReference:
    if create_comment and latest_comment:
        raise ResolutionError(
            "Cannot create a new comment and edit the latest comment at once",
            reason="invalid_reference",
        )
    candidate = argument.strip()
    if "://" in candidate:
        if comment_id is not None:
            raise _invalid(argument, "a comment id can only follow a bare issue key")
        return _parse_url(
            candidate,
            original=argument,
            create_comment=create_comment,
            latest_comment=latest_comment,
        )
    return _parse_issue_key(
        candidate,
        original=argument,
        comment_id=comment_id,
        create_comment=create_comment,
        latest_comment=latest_comment,
        base_url=base_url,
    )


def resolve(reference: ResourceReference, gateway: CommentLister) -> ResolvedTarget:
    if isinstance(reference, CommentPermalink):
        return _comment_target(reference.base_url, reference.issue_key, reference.comment_id)
    if isinstance(reference, IssuePermalink):
        return _issue_target(reference.base_url, reference.issue_key)
    if isinstance(reference, IssueAndCommentId):
        if reference.comment_id is None:
            return _issue_target(reference.base_url, reference.issue_key)
        return _comment_target(reference.base_url, reference.issue_key, reference.comment_id)
    if isinstance(reference, CreateCommentRequest):
        return ResolvedTarget(
            kind="new_comment",
            endpoint=comment_collection_endpoint(reference.base_url, reference.issue_key),
            issue_key=reference.issue_key,
        )
    if isinstance(reference, LatestCommentRequest):
        return _latest_comment_target(reference, gateway)
    raise TypeError(f"Unsupported reference type: {type(reference).__name__}")


def issue_endpoint(base_url: str, issue_key: str) -> str:
    return f"{base_url}/rest/api/2/issue/{issue_key}"


def comment_collection_endpoint(base_url: str, issue_key: str) -> str:
    return f"{issue_endpoint(base_url, issue_key)}/comment"


def comment_endpoint(base_url: str, issue_key: str, comment_id: str) -> str:
    return f"{comment_collection_endpoint(base_url, issue_key)}/{comment_id}"


def _parse_url(
    candidate: str, *, original: str, create_comment: bool, latest_comment: bool
) -> ResourceReference:
    parts = urlsplit(candidate)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise _invalid(original, "expected an http(s) URL")
    path_match = _BROWSE_PATH_RE.match(parts.path)
    if path_match is None:
        raise _invalid(original, "expected a /browse/<ISSUE> URL")

    base_url = f"{parts.scheme}://{parts.netloc}{path_match.group('context')}"
    issue_key = path_match.group("key")
    focused = parse_qs(parts.query, keep_blank_values=True).get(_FOCUSED_COMMENT_PARAM)

    if focused is not None:
        if create_comment or latest_comment:
            raise _invalid(original, "expected an issue URL, got a comment URL")
        if len(focused) != 1 or not _COMMENT_ID_RE.match(focused[0]):
            raise _invalid(original, f"{_FOCUSED_COMMENT_PARAM} must be a numeric comment id")
        return CommentPermalink(base_url=base_url, issue_key=issue_key, comment_id=focused[0])

    if create_comment:
        return CreateCommentRequest(base_url=base_url, issue_key=issue_key)
    if latest_comment:
        return LatestCommentRequest(base_url=base_url, issue_key=issue_key)
    return IssuePermalink(base_url=base_url, issue_key=issue_key)


def _parse_issue_key(
    candidate: str,
    *,
    original: str,
    comment_id: str | None,
    create_comment: bool,
    latest_comment: bool,
    base_url: str | None,
) -> ResourceReference:
    if not _ISSUE_KEY_RE.match(candidate):
        raise _invalid(original, "expected a Jira URL or an issue key like PROJ-1")
    if comment_id is not None:
        if create_comment or latest_comment:
            raise _invalid(original, "a comment id cannot be combined with -c or -l")
        if not _COMMENT_ID_RE.match(comment_id.strip()):
            raise _invalid(comment_id, "comment id must be numeric")
        comment_id = comment_id.strip()
    if base_url is None:
        raise ConfigError(f"{BASE_URL_ENV} environment variable is not set")

    if create_comment:
        return CreateCommentRequest(base_url=base_url, issue_key=candidate)
    if latest_comment:
        return LatestCommentRequest(base_url=base_url, issue_key=candidate)
    return IssueAndCommentId(base_url=base_url, issue_key=candidate, comment_id=comment_id)


def _issue_target(base_url: str, issue_key: str) -> ResolvedTarget:
    return ResolvedTarget(
        kind="issue",
        endpoint=issue_endpoint(base_url, issue_key),
        issue_key=issue_key,
    )


def _comment_target(base_url: str, issue_key: str, comment_id: str) -> ResolvedTarget:
    return ResolvedTarget(
        kind="comment",
        endpoint=comment_endpoint(base_url, issue_key, comment_id),
        issue_key=issue_key,
        comment_id=comment_id,
    )


def _latest_comment_target(
    reference: LatestCommentRequest, gateway: CommentLister
) -> ResolvedTarget:
    comments = gateway.list_comments(
        comment_collection_endpoint(reference.base_url, reference.issue_key)
    )
    if not comments:
        raise ResolutionError(
            f"Issue {reference.issue_key} has no comments",
            reason="no_comments_found",
        )
    latest = comments[-1]
    log_event(
        LOGGER,
        "latest_comment_selected",
        issue_key=reference.issue_key,
        comment_id=latest.comment_id,
        comment_count=len(comments),
    )
    return _comment_target(reference.base_url, reference.issue_key, latest.comment_id)


def _invalid(literal: str, detail: str) -> ResolutionError:
    return ResolutionError(f"invalid reference '{literal}': {detail}", reason="invalid_reference")
