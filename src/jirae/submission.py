from __future__ import annotations

import sys
from typing import TextIO


CONFIRM_PROMPT = "Submit updated text? [y/N]: "


def confirm_submit(*, stdin: TextIO | None = None, stdout: TextIO | None = None) -> bool:
    """Ask before submitting. Only a literal ``y`` counts as yes."""
    in_stream = stdin if stdin is not None else sys.stdin
    out_stream = stdout if stdout is not None else sys.stdout
    out_stream.write(CONFIRM_PROMPT)
    out_stream.flush()
    try:
        line = in_stream.readline()
    except (OSError, ValueError):
        return False
    return line.rstrip("\r\n") == "y"
