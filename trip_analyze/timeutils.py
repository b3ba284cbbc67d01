"""Epoch-millisecond and time zone helpers for CSV input and display."""

from __future__ import annotations

from datetime import datetime, tzinfo

from zoneinfo import ZoneInfo


def tzinfo_from_name(tz_name: str) -> tzinfo:
    """Resolve an IANA zone name ("UTC", "Asia/Dubai").

    Raises:
        ValueError: If the zone is unknown on this system.
    """

    try:
        return ZoneInfo(tz_name)
    except Exception as exc:  # ZoneInfo raises KeyError / ZoneInfoNotFoundError (platform dependent)
        raise ValueError(f"无效时区：{tz_name!r}。例如可用：UTC, Asia/Dubai") from exc


def dt_from_epoch_ms(epoch_ms: int, tz_name: str) -> datetime:
    """Epoch milliseconds -> aware datetime in ``tz_name`` (for display only)."""

    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=tzinfo_from_name(tz_name))


def parse_timestamp_ms(text: str, tz_name: str) -> int:
    """Parse a CSV time cell to epoch milliseconds.

    Accepts epoch milliseconds ("1735718400000", "1735718400000.0") or ISO
    datetime text ("2025-01-01 12:00:00", "2025-01-01T08:00:00+00:00").
    Datetimes without an offset are read in ``tz_name``.

    Raises:
        ValueError: If the text is neither, or the zone is unknown.
    """

    s = text.strip()
    try:
        return int(float(s))
    except (ValueError, OverflowError):
        pass

    try:
        dt = datetime.fromisoformat(s)
    except ValueError as exc:
        raise ValueError(f"无法解析时间：{text!r}。支持毫秒时间戳或 2025-01-01 12:00:00 格式") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tzinfo_from_name(tz_name))
    return int(dt.timestamp() * 1000)
