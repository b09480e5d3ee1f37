"""Pure week domain logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta

DEFAULT_LOCALE = "pt"

DAY_NAMES = {
    "pt": ["Segunda", "Terça", "Quarta", "Quinta", "Sexta", "Sábado", "Domingo"],
    "en": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
}

FUTURE_TASKS_TITLE = {
    "pt": "Tarefas Futuras",
    "en": "Future Tasks",
}


@dataclass(frozen=True)
class WeekDay:
    """One slot of the current work week."""

    name: str
    date: date
    display_key: str
    label: str
    short_label: str


def normalize_locale(locale: str | None) -> str:
    """Return a supported locale, falling back to the default."""
    if not locale:
        return DEFAULT_LOCALE
    code = locale.split("-")[0].split("_")[0].lower()
    return code if code in DAY_NAMES else DEFAULT_LOCALE


def day_of(dt: datetime | date) -> date:
    """Calendar day of a datetime, time of day dropped."""
    if isinstance(dt, datetime):
        return dt.date()
    return dt


def format_day_key(day: date, locale: str | None = None) -> str:
    """Full day key: DD/MM/YYYY (pt) or MM/DD/YYYY (en)."""
    if normalize_locale(locale) == "en":
        return day.strftime("%m/%d/%Y")
    return day.strftime("%d/%m/%Y")


def format_short_date(day: date, locale: str | None = None) -> str:
    """Short day label: DD/MM (pt) or MM/DD (en)."""
    if normalize_locale(locale) == "en":
        return day.strftime("%m/%d")
    return day.strftime("%d/%m")


def parse_day_key(key: str, locale: str | None = None) -> date:
    """
    Inverse of format_day_key.

    Raises ValueError if the key is not a valid day for the locale.
    """
    fmt = "%m/%d/%Y" if normalize_locale(locale) == "en" else "%d/%m/%Y"
    return datetime.strptime(key.strip(), fmt).date()


def week_start(now: datetime | date) -> date:
    """
    Monday of the week containing `now`.

    Sunday counts as the last day of the week, so it maps back six days.
    """
    today = day_of(now)
    # isoweekday: Monday=1 .. Sunday=7; convert to Sunday=0 numbering
    day_of_week = today.isoweekday() % 7
    offset = -6 if day_of_week == 0 else 1 - day_of_week
    return today + timedelta(days=offset)


def compute_week(now: datetime | date, locale: str | None = None) -> list[WeekDay]:
    """
    The 7 canonical week days (Monday first) for `now`.

    Pure function - no I/O, never reads the clock.
    """
    locale = normalize_locale(locale)
    monday = week_start(now)
    days = []
    for index, name in enumerate(DAY_NAMES[locale]):
        d = monday + timedelta(days=index)
        days.append(
            WeekDay(
                name=name,
                date=d,
                display_key=name,
                label=format_day_key(d, locale),
                short_label=format_short_date(d, locale),
            )
        )
    return days
