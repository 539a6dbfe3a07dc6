"""Human-readable text for a ``Count``.

Locales: "en" and "zh".
"""

from datetime import date

from countdown.count import Count

# Sunday-first, repeated so weekday + day (up to 7 ahead) stays in range
_WEEKDAYS = {
    "en": ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"] * 2,
    "zh": list("日一二三四五六日一二三四五六"),
}

_NEAR_DAYS = {
    "en": ["today", "tomorrow", "the day after tomorrow"],
    "zh": ["今日", "明日", "后天"],
}

_UNITS = {
    "en": ("d ", "h ", "m ", "s"),
    "zh": ("天", "时", "分", "秒"),
}


SUPPORTED_LOCALES = tuple(_NEAR_DAYS)


def _check_locale(locale: str) -> None:
    if locale not in SUPPORTED_LOCALES:
        raise ValueError(f"Unsupported locale: {locale}")


def day_label(day: int | float = 0, *, locale: str = "en", today: date | None = None) -> str:
    """Describe a calendar-adjusted day count relative to today.

    0-2 read as "today"/"tomorrow"/"the day after tomorrow", 3-7 as a
    weekday of this or next week, anything larger as "N days from now".
    """
    _check_locale(locale)
    day = max(int(day), 0)

    if day < 3:
        return _NEAR_DAYS[locale][day]

    if day < 8:
        today = today or date.today()
        destiny = (today.weekday() + 1) % 7 + day
        name = _WEEKDAYS[locale][destiny]
        if locale == "zh":
            return f"{'下' if destiny > 6 else '本'}周{name}"
        return f"{'next' if destiny > 6 else 'this'} {name}"

    if locale == "zh":
        return f"{day}天后"
    return f"{day} days from now"


def countdown_text(
    second: int = 0,
    minute: int = 0,
    hour: int = 0,
    day: int = 0,
    *,
    locale: str = "en",
) -> str:
    """Compact countdown such as ``2d 3h 4m 5s``; zero days and hours are omitted."""
    _check_locale(locale)
    day_unit, hour_unit, minute_unit, second_unit = _UNITS[locale]
    day_text = f"{int(day)}{day_unit}" if day else ""
    hour_text = f"{int(hour)}{hour_unit}" if hour else ""
    return f"{day_text}{hour_text}{int(minute)}{minute_unit}{int(second)}{second_unit}"


def format_count(count: Count, *, locale: str = "en") -> str:
    return countdown_text(count.second, count.minute, count.hour, count.days, locale=locale)
