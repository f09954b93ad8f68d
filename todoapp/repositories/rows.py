# Rev 0.1.0
"""Column codecs shared by every repository.

Timestamps are stored as local wall-clock ISO strings without offset
(YYYY-MM-DDTHH:MM:SS) so SQL DATE() buckets rows by the user's local day.
"""
from __future__ import annotations
from datetime import date, datetime
from typing import Iterable, Iterator, List, Optional, Sequence

# Stay well below SQLite's host-parameter limit
MAX_IN_PARAMS = 500


def format_ts(value: datetime) -> str:
    if value.tzinfo is not None:
        # aware values are shifted to local wall-clock time before the offset is dropped
        value = value.astimezone().replace(tzinfo=None)
    return value.replace(microsecond=0).isoformat(timespec="seconds")


def parse_ts(text: Optional[str]) -> Optional[datetime]:
    if text is None:
        return None
    return datetime.fromisoformat(str(text))


def parse_date(text: Optional[str]) -> Optional[date]:
    if not text:
        return None
    return date.fromisoformat(str(text)[:10])


def chunked(ids: Iterable[int], size: int = MAX_IN_PARAMS) -> Iterator[List[int]]:
    batch: List[int] = []
    for i in ids:
        batch.append(int(i))
        if len(batch) == size:
            yield batch
            batch = []
    if batch:
        yield batch


def placeholders(values: Sequence[object]) -> str:
    return ", ".join("?" * len(values))
