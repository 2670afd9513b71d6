from pathlib import Path

import pytest

from order_intake.errors import EmailSourceError
from order_intake.sources import EmailSource, clean_text


def test_list_files_filters_by_pattern_and_sorts(tmp_path: Path) -> None:
    for name in ("sample_email_2.txt", "sample_email_1.txt", "notes.txt"):
        (tmp_path / name).write_text("body", encoding="utf-8")

    source = EmailSource(tmp_path, "sample_email_*.txt")

    assert [p.name for p in source.list_files()] == ["sample_email_1.txt", "sample_email_2.txt"]


def test_missing_directory_lists_nothing(tmp_path: Path) -> None:
    assert EmailSource(tmp_path / "absent").list_files() == []


def test_read_rejects_empty_and_missing_files(tmp_path: Path) -> None:
    empty = tmp_path / "empty.txt"
    empty.write_text("  \n\n", encoding="utf-8")
    source = EmailSource(tmp_path)

    with pytest.raises(EmailSourceError):
        source.read(empty)
    with pytest.raises(EmailSourceError):
        source.read(tmp_path / "missing.txt")


def test_display_name_is_relative_to_source_directory(tmp_path: Path) -> None:
    source = EmailSource(tmp_path)

    assert source.display_name(tmp_path / "sample_email_1.txt") == "sample_email_1.txt"
    assert source.display_name(Path("/elsewhere/mail.txt")) == "mail.txt"


def test_clean_text_normalizes_line_endings() -> None:
    assert clean_text("Hello  \r\n\r\n\r\n\r\n2 x Desk\r\n") == "Hello\n\n2 x Desk"


def test_read_keeps_non_utf8_email(tmp_path: Path) -> None:
    path = tmp_path / "sample_email_cp1252.txt"
    path.write_bytes("Please send 5 x Desk TRÄNHOLM 19".encode("cp1252"))

    text = EmailSource(tmp_path).read(path)

    assert text.startswith("Please send 5 x Desk TR")
    assert text.endswith("NHOLM 19")
    assert "�" in text
