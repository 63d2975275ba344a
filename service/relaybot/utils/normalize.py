"""
Name sanitization utilities.

Ensures user-supplied names are safe to use as local file names and as
remote storage path segments.
"""

import re
from pathlib import PurePosixPath, PureWindowsPath
from typing import Iterable, Optional

# Anything that is not a word character, dot or dash
_UNSAFE_CHARS = re.compile(r'[^\w.\-]')
_WHITESPACE = re.compile(r'\s+')


def sanitize_filename(value: Optional[str], default: str = "file") -> str:
    """
    Reduce an attachment name to a safe base name.

    Input formats handled:
    - "notes.txt" (kept as is)
    - "my notes.txt" -> "my_notes.txt"
    - "../../etc/passwd" -> "passwd"
    - "C:\\Users\\me\\report.pdf" -> "report.pdf"
    - "résumé (final).pdf" -> "résumé_final.pdf"

    Returns `default` if nothing usable is left.
    """
    if not value or not isinstance(value, str):
        return default

    # Drop any directory part, whichever separator the client used
    name = PureWindowsPath(PurePosixPath(value.strip()).name).name

    name = _WHITESPACE.sub("_", name)
    name = _UNSAFE_CHARS.sub("", name)

    # No hidden files or dot-only names
    name = name.lstrip(".")

    if not name:
        return default

    return name


def sanitize_folder_name(parts: Iterable[str]) -> str:
    """
    Join command arguments into a single folder name.

    ["my", "folder"] -> "my_folder"
    ["reports/2024!"] -> "reports2024"
    [".."] -> ""

    Leading and trailing dots and underscores are dropped. Returns an empty
    string if nothing usable is left.
    """
    joined = "_".join(part for part in parts if part)
    return _UNSAFE_CHARS.sub("", joined).strip("._")
