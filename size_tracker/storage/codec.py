"""
Record codec.

Size records are stored as compact JSON objects with the keys ``Commit``,
``Date`` and ``Size``. Notes written by every earlier release use this
shape, so it must not change.
"""

import json
import re
from datetime import datetime, timezone
from typing import Dict, Union

from ..errors import CorruptEntry, SizeOverflow
from .models import SizeRecord

_FRACTION_RE = re.compile(r"\.(\d+)")


def format_timestamp(ts: datetime) -> str:
    """Format a timestamp as RFC 3339, using ``Z`` for UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    text = ts.isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC 3339 timestamp.

    Accepts a ``Z`` suffix and fractional seconds of any precision
    (truncated to microseconds).

    Raises:
        ValueError: If the text is not a valid timestamp
    """
    text = text.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    ts = datetime.fromisoformat(text)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def encode_record(record: SizeRecord) -> bytes:
    """Serialize a record to the stored note content."""
    payload = {
        "Commit": record.commit,
        "Date": format_timestamp(record.timestamp),
        "Size": record.size,
    }
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def decode_record(raw: Union[bytes, str], blob: str = "") -> SizeRecord:
    """Deserialize stored note content into a record.
    
    Field names are matched case-insensitively and ``timestamp`` is accepted
    in place of ``Date``.
    
    Args:
        raw: Note content, optionally with a trailing newline
        blob: Object id of the note, for error messages
        
    Returns:
        The decoded SizeRecord
        
    Raises:
        CorruptEntry: If the content is not a valid size record
    """
    where = f" in note {blob}" if blob else ""
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        data = json.loads(text.rstrip("\n"))
    except (UnicodeDecodeError, ValueError) as e:
        raise CorruptEntry(f"malformed size record{where}: {e}", blob) from e
    
    if not isinstance(data, dict):
        raise CorruptEntry(f"size record{where} is not a JSON object", blob)
    
    fields: Dict[str, object] = {str(k).lower(): v for k, v in data.items()}
    if "date" not in fields and "timestamp" in fields:
        fields["date"] = fields["timestamp"]
    
    for name in ("commit", "date", "size"):
        if name not in fields:
            raise CorruptEntry(f"size record{where} is missing '{name}'", blob)
    
    commit, date, size = fields["commit"], fields["date"], fields["size"]
    if not isinstance(commit, str) or not commit:
        raise CorruptEntry(f"size record{where} has an invalid commit", blob)
    if not isinstance(date, str):
        raise CorruptEntry(f"size record{where} has an invalid date", blob)
    # bool is an int subclass
    if isinstance(size, bool) or not isinstance(size, int):
        raise CorruptEntry(f"size record{where} has a non-integer size", blob)
    
    try:
        timestamp = parse_timestamp(date)
    except ValueError as e:
        raise CorruptEntry(f"size record{where} has an invalid date {date!r}", blob) from e
    
    try:
        return SizeRecord(commit=commit, timestamp=timestamp, size=size)
    except SizeOverflow as e:
        raise CorruptEntry(f"size record{where}: {e}", blob) from e
