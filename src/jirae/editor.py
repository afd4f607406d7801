from __future__ import annotations

from contextlib import contextmanager
import logging
import os
from pathlib import Path
import shlex
import subprocess
import tempfile
from typing import Iterator, Literal

from jirae.observability import log_event


LOGGER = logging.getLogger("jirae.editor")
EditFailureReason = Literal["editor_failed", "scratch_io"]

_SCRATCH_PREFIX = "jirae-"
_SCRATCH_SUFFIX = ".txt"


class EditError(RuntimeError):
    def __init__(
        self, message: str, *, reason: EditFailureReason, exit_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.exit_code = exit_code


def edit_text(initial_text: str, *, editor_command: str) -> str:
    """Let the user edit ``initial_text`` in their editor and return the result.

    The text is staged in a fresh temp file that is removed however the
    session ends. The returned text has surrounding whitespace stripped.
    """
    argv = _editor_argv(editor_command)
    with scratch_file(initial_text) as path:
        _run_editor([*argv, str(path)])
        try:
            with path.open(encoding="utf-8", newline="") as fh:
                edited = fh.read()
        except (OSError, UnicodeError) as exc:
            raise EditError(
                f"Could not read edited text from {path}: {exc}", reason="scratch_io"
            ) from exc
    log_event(
        LOGGER,
        "edit_finished",
        initial_length=len(initial_text),
        edited_length=len(edited.strip()),
    )
    return edited.strip()


@contextmanager
def scratch_file(text: str) -> Iterator[Path]:
    try:
        fd, raw_path = tempfile.mkstemp(prefix=_SCRATCH_PREFIX, suffix=_SCRATCH_SUFFIX)
    except OSError as exc:
        raise EditError(f"Could not create scratch file: {exc}", reason="scratch_io") from exc
    path = Path(raw_path)
    try:
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
                fh.write(text)
        except (OSError, UnicodeError) as exc:
            raise EditError(
                f"Could not write scratch file {path}: {exc}", reason="scratch_io"
            ) from exc
        yield path
    finally:
        path.unlink(missing_ok=True)


def _editor_argv(editor_command: str) -> list[str]:
    try:
        argv = shlex.split(editor_command)
    except ValueError as exc:
        raise EditError(
            f"Could not parse editor command {editor_command!r}: {exc}", reason="editor_failed"
        ) from exc
    if not argv:
        raise EditError("Editor command is empty", reason="editor_failed")
    return argv


def _run_editor(argv: list[str]) -> None:
    log_event(LOGGER, "editor_started", command=argv[0])
    try:
        # No capture: the editor owns the terminal until it exits.
        proc = subprocess.run(argv, check=False)
    except OSError as exc:
        raise EditError(f"Could not start editor {argv[0]!r}: {exc}", reason="editor_failed") from exc
    if proc.returncode != 0:
        LOGGER.error(
            "event=editor_failed command=%s exit_code=%s",
            argv[0],
            proc.returncode,
        )
        raise EditError(
            f"Editor {argv[0]!r} exited with status {proc.returncode}",
            reason="editor_failed",
            exit_code=proc.returncode,
        )
