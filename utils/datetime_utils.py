import re
from datetime import datetime, date, tzinfo
from typing import Optional, Union

import pytz

# Нулевое время, которое писали старые версии сервиса вместо пустого completed_at
ZERO_TIME_YEAR = 1

# Дробная часть секунд: старые файлы содержат до 9 цифр (наносекунды)
_FRACTION_RE = re.compile(r'(\d{2}:\d{2}:\d{2})\.(\d+)')

_timezone: Optional[tzinfo] = None

def set_timezone(name: Optional[str]) -> None:
    """Задать часовой пояс приложения (None или "" - локальное время системы)"""
    global _timezone
    _timezone = pytz.timezone(name) if name else None

def now_local() -> datetime:
    """Текущее время без tzinfo в часовом поясе приложения"""
    if _timezone is None:
        return datetime.now()
    return datetime.now(_timezone).replace(tzinfo=None)

def to_naive_local(dt: datetime) -> datetime:
    """Привести aware-время к часовому поясу приложения и убрать tzinfo"""
    if dt.tzinfo is None:
        return dt
    if dt.year == ZERO_TIME_YEAR:
        # Нулевое время не переводится между поясами
        return dt.replace(tzinfo=None)
    if _timezone is None:
        return dt.astimezone().replace(tzinfo=None)
    return dt.astimezone(_timezone).replace(tzinfo=None)

def _normalize_fraction(value: str) -> str:
    """Дробная часть секунд ровно из 6 цифр, лишние отбрасываются"""
    return _FRACTION_RE.sub(
        lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", value, count=1
    )

def parse_datetime(value: Union[str, datetime, None], zero_as_none: bool = False) -> Optional[datetime]:
    """
    Разбор ISO-8601 / RFC3339 строки в наивное локальное время

    Нулевое время (0001-01-01) не переводится между поясами: при
    zero_as_none=True возвращается None, иначе оно остается как есть.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(_normalize_fraction(value.replace("Z", "+00:00")))
    if dt.year == ZERO_TIME_YEAR and zero_as_none:
        return None
    return to_naive_local(dt)

def format_datetime(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 со смещением часового пояса приложения"""
    if dt is None:
        return None
    if dt.tzinfo is None and dt.year != ZERO_TIME_YEAR:
        dt = _timezone.localize(dt) if _timezone is not None else dt.astimezone()
    return dt.isoformat()

def is_same_day(dt: datetime, day: date) -> bool:
    return dt.date() == day
