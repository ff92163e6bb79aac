# timewindow.py — 同期対象の期間 (start, end] と件数上限
#
# end の書式:
#   ""                      -> 上限なし
#   "-2d" / "3d"            -> now ± n 日
#   "-6h" / "2h"            -> now ± n 時間
#   "2024-05-01 10:00:00"   -> そのまま
# 例: cron で毎時 `sync --end=-2d --limit=500`

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from config import DATETIME_FMT, now as _now
from errors import ParseError, ValidationError

SIGNED_INT_RE = re.compile(r"^[+-]?\d+$")
UNITS = {"d": timedelta(days=1), "h": timedelta(hours=1)}


@dataclass
class TimeWindow:
    start: Optional[str] = None   # DATETIME_FMT
    end: Optional[str] = None     # DATETIME_FMT
    limit: int = 0                # 0 = 上限なし


def parse_datetime(s: str) -> datetime:
    try:
        return datetime.strptime(s, DATETIME_FMT)
    except ValueError as e:
        raise ParseError(f"failed to parse date time {s!r}, expected format YYYY-MM-DD HH:MM:SS") from e


def resolve_end(expression: Optional[str], now: Optional[datetime] = None) -> Optional[str]:
    end = (expression or "").strip()
    if not end:
        return None

    unit = end[-1]
    number = end[:-1]
    if unit in UNITS and SIGNED_INT_RE.match(number):
        base = now if now is not None else _now()
        return (base + int(number) * UNITS[unit]).strftime(DATETIME_FMT)

    # 相対表現として読めなければ絶対日時。ゼロ埋めなしの入力も正規の書式に揃える
    return parse_datetime(end).strftime(DATETIME_FMT)


def build_window(
    start: Optional[str] = None,
    end: Optional[str] = None,
    limit: int = 0,
    now: Optional[datetime] = None,
) -> TimeWindow:
    start = (start or "").strip() or None
    if start is not None:
        start = parse_datetime(start).strftime(DATETIME_FMT)

    if limit is None:
        limit = 0
    if limit < 0:
        raise ValidationError(f"limit must not be negative: {limit}")

    return TimeWindow(start=start, end=resolve_end(end, now), limit=limit)
