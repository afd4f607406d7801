from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import cast

import requests
from requests.auth import HTTPBasicAuth

from jirae.models import Comment, Credentials
from jirae.observability import log_event


LOGGER = logging.getLogger("jirae.jira_gateway")
_JSON_HEADERS = {"Accept": "application/json"}
_WRITE_HEADERS = {"Accept": "application/json", "Content-Type": "application/json"}


class JiraGatewayError(RuntimeError):
    """Base class for failures talking to the Jira REST API."""


class JiraTransportError(JiraGatewayError):
    """The request never produced an HTTP response (connection, timeout, I/O)."""


class JiraApplicationError(JiraGatewayError):
    def __init__(self, *, method: str, endpoint: str, status: int, body: str) -> None:
        self.method = method
        self.endpoint = endpoint
        self.status = status
        self.body = body
        shown = body.strip() or "<empty>"
        super().__init__(f"Got non-2xx response {status} for {method} {endpoint}: {shown}")


class JiraResponseError(JiraGatewayError):
    """A 2xx response whose payload did not have the expected shape."""


@dataclass(frozen=True)
class JiraGateway:
    credentials: Credentials
    timeout_seconds: float | None = 30.0
    session: requests.Session = field(
        default_factory=requests.Session,
        repr=False,
        compare=False,
    )

    def fetch_issue_text(self, endpoint: str) -> str:
        payload_obj = _require_object(self._get_json(endpoint), what="issue")
        fields_obj = _as_object_dict(payload_obj.get("fields"))
        if fields_obj is None:
            raise JiraResponseError("Unexpected Jira response: issue has no fields object")
        text = _as_text(fields_obj.get("description"), field="fields.description")
        log_event(LOGGER, "jira_read", endpoint=endpoint, kind="issue", text_length=len(text))
        return text

    def fetch_comment_text(self, endpoint: str) -> str:
        payload_obj = _require_object(self._get_json(endpoint), what="comment")
        text = _as_text(payload_obj.get("body"), field="body")
        log_event(LOGGER, "jira_read", endpoint=endpoint, kind="comment", text_length=len(text))
        return text

    def list_comments(self, endpoint: str) -> tuple[Comment, ...]:
        payload_obj = _require_object(self._get_json(endpoint), what="comment collection")
        comments_obj = payload_obj.get("comments")
        if not isinstance(comments_obj, list):
            raise JiraResponseError("Unexpected Jira response: expected list for comments")

        comments: list[Comment] = []
        for item in comments_obj:
            item_obj = _as_object_dict(item)
            if item_obj is None:
                raise JiraResponseError("Unexpected Jira response: comment is not an object")
            comment_id = item_obj.get("id")
            if not isinstance(comment_id, str | int) or isinstance(comment_id, bool):
                raise JiraResponseError("Unexpected Jira response: comment has no id")
            comments.append(
                Comment(
                    comment_id=str(comment_id),
                    body=_as_text(item_obj.get("body"), field="comments[].body"),
                )
            )
        log_event(LOGGER, "jira_read", endpoint=endpoint, kind="comments", count=len(comments))
        return tuple(comments)

    def update_issue_text(self, endpoint: str, text: str) -> None:
        self._write("PUT", endpoint, {"fields": {"description": text}})

    def update_comment_text(self, endpoint: str, text: str) -> None:
        self._write("PUT", endpoint, {"body": text})

    def create_comment(
        self, endpoint: str, text: str, extra_fields: dict[str, object] | None = None
    ) -> None:
        # Extra fields go through untouched; only "body" is ours.
        payload: dict[str, object] = dict(extra_fields or {})
        payload["body"] = text
        self._write("POST", endpoint, payload)

    def _get_json(self, endpoint: str) -> object:
        response = self._request("GET", endpoint, headers=_JSON_HEADERS)
        try:
            return response.json()
        except ValueError as exc:
            raise JiraResponseError(
                f"Unexpected Jira response: body of GET {endpoint} is not JSON"
            ) from exc

    def _write(self, method: str, endpoint: str, payload: dict[str, object]) -> None:
        try:
            response = self._request(method, endpoint, headers=_WRITE_HEADERS, payload=payload)
        except JiraGatewayError as exc:
            log_event(
                LOGGER,
                "jira_write_failed",
                method=method,
                endpoint=endpoint,
                error_type=type(exc).__name__,
                status=getattr(exc, "status", None),
            )
            raise
        log_event(
            LOGGER,
            "jira_write",
            method=method,
            endpoint=endpoint,
            status=response.status_code,
        )

    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        headers: dict[str, str],
        payload: dict[str, object] | None = None,
    ) -> requests.Response:
        try:
            response = self.session.request(
                method,
                endpoint,
                auth=HTTPBasicAuth(self.credentials.principal, self.credentials.secret),
                headers=headers,
                json=payload,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise JiraTransportError(f"{method} {endpoint} failed: {exc}") from exc

        if response.status_code < 200 or response.status_code >= 300:
            raise JiraApplicationError(
                method=method,
                endpoint=endpoint,
                status=response.status_code,
                body=_read_body(response),
            )
        return response


def _read_body(response: requests.Response) -> str:
    try:
        body = response.text
    except (requests.RequestException, ValueError) as exc:
        return f"<unreadable body: {exc}>"
    return body


def _require_object(value: object, *, what: str) -> dict[str, object]:
    value_obj = _as_object_dict(value)
    if value_obj is None:
        raise JiraResponseError(f"Unexpected Jira response: expected object for {what}")
    return value_obj


def _as_object_dict(value: object) -> dict[str, object] | None:
    if not isinstance(value, dict):
        return None
    if not all(isinstance(key, str) for key in value.keys()):
        return None
    return cast(dict[str, object], value)


def _as_text(value: object, *, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    raise JiraResponseError(f"Unexpected Jira response type for {field}")
