from __future__ import annotations

import argparse
import os
import sys

from jirae.config import ConfigError, load_config, parse_extra_fields
from jirae.jira_gateway import JiraGateway
from jirae.observability import configure_logging
from jirae.workflow import EXIT_CONFIG, EXIT_RUNTIME, EditRequest, EditWorkflow


_DESCRIPTION = "Edit the description of a Jira issue or the body of a comment in $EDITOR."
_EPILOG = """\
references:
  COMMENT_URL                  https://example.atlassian.net/browse/PROJ-1?focusedCommentId=10001
  ISSUE_URL                    https://example.atlassian.net/browse/PROJ-1
  ISSUE_KEY [COMMENT_ID]       PROJ-1 10001 (requires JIRA_URL)

examples:
  jirae COMMENT_URL
  jirae ISSUE_URL
  jirae -l ISSUE_URL
  jirae -c -f '{"visibility": {"type": "role", "value": "Admins"}}' ISSUE_URL

The following environment variables need to be set:
  EDITOR
  JIRA_USER
  JIRA_TOKEN
  JIRA_URL               only when passing a bare issue key
  JIRAE_TIMEOUT_SECONDS  optional, defaults to 30
"""


class _UsageParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(EXIT_CONFIG, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _UsageParser(
        prog="jirae",
        description=_DESCRIPTION,
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("reference", help="Comment URL, issue URL, or issue key")
    parser.add_argument(
        "comment_id",
        nargs="?",
        default=None,
        help="Comment id to edit when REFERENCE is an issue key",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "-c",
        "--create-comment",
        action="store_true",
        help="Create a new comment for the issue with the given URL",
    )
    mode.add_argument(
        "-l",
        "--latest-comment",
        action="store_true",
        help="Edit the most recent comment of the issue",
    )
    parser.add_argument(
        "-f",
        "--fields",
        default="{}",
        help="JSON object with additional fields to set when creating comments",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose runtime logging to stderr",
    )
    return parser


def main() -> None:
    args = build_parser().parse_args()
    configure_logging(args.verbose)
    sys.exit(run(args))


def run(args: argparse.Namespace) -> int:
    try:
        config = load_config(os.environ)
        extra_fields = parse_extra_fields(str(args.fields))
        workflow = EditWorkflow(
            gateway=JiraGateway(config.credentials, timeout_seconds=config.timeout_seconds),
            editor_command=config.editor_command,
            base_url=config.base_url,
        )
        return workflow.run(
            EditRequest(
                argument=str(args.reference),
                comment_id=args.comment_id,
                create_comment=bool(args.create_comment),
                latest_comment=bool(args.latest_comment),
                extra_fields=extra_fields,
            )
        )
    except ConfigError as exc:
        print(f"Fatal error: {exc}", file=sys.stderr)
        return EXIT_CONFIG
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return EXIT_RUNTIME
