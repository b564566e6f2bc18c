"""``YYYY-MM-DD`` date filters."""

from datetime import UTC, date, datetime, time, timedelta

from storefront.shared.errors import DomainError

DATE_FORMAT = "%Y-%m-%d"


def parse_date(value: str | None, field: str = "date") -> date | None:
    if not value:
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as exc:
        raise DomainError(f"Invalid date '{value}', expected YYYY-MM-DD", field=field) from exc


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


def end_of_day(day: date) -> datetime:
    """Exclusive upper bound: midnight of the following day."""
    return start_of_day(day + timedelta(days=1))


def date_range_filters(field: str, start: date | None, end: date | None) -> dict:
    """Protean lookup kwargs for an inclusive calendar-day range on ``field``."""
    if start and end and end < start:
        raise DomainError("end_date must not be before start_date", field="end_date")

    filters = {}
    if start:
        filters[f"{field}__gte"] = start_of_day(start)
    if end:
        filters[f"{field}__lt"] = end_of_day(end)
    return filters
