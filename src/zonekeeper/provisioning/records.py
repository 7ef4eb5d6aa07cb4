"""Record set definition applied to every newly onboarded zone.

The record set is a CSV file with five columns and an optional header row:

    type,name,content,ttl,proxied
    A,@,192.0.2.10,1,true
    CNAME,www,example.com,1,true
    MX,@,mail.example.net,3600,false

Rows are validated individually so that a single bad row never prevents the
remaining rows from being applied.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Any

RECORD_FIELDS = 5
HEADER_MARKER = "type"

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})


class RecordSetError(Exception):
    """The record set file could not be read or parsed as CSV."""


class InvalidRecordError(ValueError):
    """A single record row is malformed."""


def parse_bool(value: str) -> bool:
    """Parse a boolean in the 1/t/true/0/f/false vocabulary."""
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidRecordError(f"invalid proxied value: {value!r}")


@dataclass(frozen=True)
class RecordSpec:
    """One DNS record to create in a new zone."""

    type: str
    name: str
    content: str
    ttl: int
    proxied: bool

    @classmethod
    def from_row(cls, row: list[str]) -> RecordSpec:
        """Validate a CSV row.

        Raises:
            InvalidRecordError: If the row does not have exactly five fields,
                the TTL is not an integer, or proxied is not a boolean.
        """
        if len(row) != RECORD_FIELDS:
            raise InvalidRecordError(f"invalid record format: {row}")

        record_type, name, content, ttl, proxied = row
        digits = ttl[1:] if ttl[:1] in ("+", "-") else ttl
        if not (digits.isascii() and digits.isdigit()):
            raise InvalidRecordError(f"invalid TTL: {ttl!r}")
        ttl_value = int(ttl)

        return cls(
            type=record_type,
            name=name,
            content=content,
            ttl=ttl_value,
            proxied=parse_bool(proxied),
        )

    def to_payload(self) -> dict[str, Any]:
        """Cloudflare DNS record creation payload."""
        return {
            "type": self.type,
            "name": self.name,
            "content": self.content,
            "ttl": self.ttl,
            "proxied": self.proxied,
        }


def parse_record_table(text: str) -> list[list[str]]:
    """Split CSV text into rows, dropping blank lines and the header row.

    Raises:
        RecordSetError: If the text is not valid CSV.
    """
    try:
        rows = [row for row in csv.reader(io.StringIO(text), strict=True) if row]
    except csv.Error as e:
        raise RecordSetError(f"invalid record set: {e}") from e

    if rows and rows[0][0] == HEADER_MARKER:
        rows = rows[1:]
    return rows


def read_record_table(path: str | Path) -> list[list[str]]:
    """Read and split the record set file.

    Raises:
        RecordSetError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise RecordSetError(f"cannot read record set {path}: {e}") from e
    return parse_record_table(text)
