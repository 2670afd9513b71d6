"""Email source module for enumerating and reading order emails."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Union

from order_intake.errors import EmailSourceError


class EmailSource:
    """Directory of plain-text order emails, one email per file."""

    def __init__(self, directory: Union[str, Path], pattern: str = "*.txt") -> None:
        """Initialize the email source.

        Args:
            directory: Directory holding the email files.
            pattern: Glob pattern selecting email files inside the directory.
        """
        self.directory = Path(directory)
        self.pattern = pattern

    def list_files(self) -> List[Path]:
        """List the email files of one batch run.

        Returns:
            Matching files sorted by name. A missing directory yields no files.
        """
        if not self.directory.is_dir():
            return []
        return sorted(p for p in self.directory.glob(self.pattern) if p.is_file())

    def display_name(self, path: Path) -> str:
        """Name recorded as the order's source file.

        Args:
            path: Path to an email file.

        Returns:
            The path relative to the source directory when possible.
        """
        try:
            return path.relative_to(self.directory).as_posix()
        except ValueError:
            return path.name

    def read(self, path: Union[str, Path]) -> str:
        """Read one email.

        Args:
            path: Path to the email file.

        Returns:
            The email text with normalized line endings. Bytes that are not
            valid UTF-8 are replaced rather than rejected.

        Raises:
            EmailSourceError: If the file is missing, unreadable or empty.
        """
        file_path = Path(path)
        try:
            content = file_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise EmailSourceError(f"Cannot read email {file_path}: {e}") from e

        content = clean_text(content)
        if not content:
            raise EmailSourceError(f"Email file is empty: {file_path}")
        return content


def clean_text(text: str) -> str:
    """Normalize line endings and trim blank padding.

    Args:
        text: Raw email text.

    Returns:
        Cleaned text.
    """
    # Keep line structure, the model reads quantities line by line
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+\n", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()
