"""
Parsing for operator bulk credential imports.

Operators paste one credential per line in any of these shapes::

    email,password,2024-05-01
    email|password|2024-05-01
    email password

Each usable line becomes an independent insert against the credential
store; nothing here batches or wraps the rows in a transaction.
"""

import re
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

_TOKEN_SPLIT = re.compile(r"[,|\s]+")


class ImportedCredential(BaseModel):
    """One parsed bulk-import row, ready to be saved as a new credential."""

    service: str
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)
    published_at: datetime
    is_visible: bool = True
    line_number: int


def parse_import_date(value: str) -> Optional[datetime]:
    """Parse an ISO date or datetime; naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_import_line(
    line: str, service: str, now: datetime, line_number: int = 0
) -> Optional[ImportedCredential]:
    """
    Parse a single bulk-import line.

    Returns None for blank lines and lines with fewer than two tokens. A third
    token that does not parse as a date is ignored and ``now`` is used.
    """
    if not line.strip():
        return None

    parts = [part for part in _TOKEN_SPLIT.split(line) if part]
    if len(parts) < 2:
        return None

    published_at = now
    if len(parts) >= 3:
        published_at = parse_import_date(parts[2]) or now

    return ImportedCredential(
        service=service,
        email=parts[0].strip(),
        password=parts[1].strip(),
        published_at=published_at,
        line_number=line_number,
    )


def parse_bulk_import(
    text: str, service: str, now: Optional[datetime] = None
) -> List[ImportedCredential]:
    """
    Parse pasted bulk-import text into credential rows for one service.

    Args:
        text: Raw pasted text, one credential per line
        service: Service name every imported credential belongs to
        now: Publication timestamp for rows without a date (default: current UTC time)

    Returns:
        Parsed rows in input order; unusable lines are skipped
    """
    now = now or datetime.now(timezone.utc)
    rows = []
    for number, line in enumerate(text.split("\n"), start=1):
        row = parse_import_line(line, service, now, line_number=number)
        if row is not None:
            rows.append(row)
    return rows
