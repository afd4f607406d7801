from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from jirae.workflow import SubmitError


TargetKind = Literal["issue", "comment", "new_comment"]


@dataclass(frozen=True)
class Credentials:
    principal: str
    secret: str = field(repr=False)


@dataclass(frozen=True)
class CommentPermalink:
    base_url: str
    issue_key: str
    comment_id: str


@dataclass(frozen=True)
class IssuePermalink:
    base_url: str
    issue_key: str


@dataclass(frozen=True)
class IssueAndCommentId:
    base_url: str
    issue_key: str
    comment_id: str | None


@dataclass(frozen=True)
class CreateCommentRequest:
    base_url: str
    issue_key: str


@dataclass(frozen=True)
class LatestCommentRequest:
    base_url: str
    issue_key: str


ResourceReference = (
    CommentPermalink
    | IssuePermalink
    | IssueAndCommentId
    | CreateCommentRequest
    | LatestCommentRequest
)


@dataclass(frozen=True)
class ResolvedTarget:
    kind: TargetKind
    endpoint: str
    issue_key: str
    comment_id: str | None = None


@dataclass(frozen=True)
class Comment:
    comment_id: str
    body: str


@dataclass(frozen=True)
class SubmissionOutcome:
    submitted: bool
    text: str
    error: SubmitError | None = None
