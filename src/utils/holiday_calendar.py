"""
Brazilian national holiday calendar.

Fixed-date national holidays plus the movable feasts derived from Easter
(Carnival, Good Friday, Easter, Corpus Christi). Used to seed each
organization's holiday table; the table, not this module, is what the
agenda reads.
"""

from datetime import date, timedelta
from typing import Dict, Iterable, List, NamedTuple


class HolidayDate(NamedTuple):
    date: date
    name: str


# (month, day, name)
FIXED_NATIONAL_HOLIDAYS = (
    (1, 1, "Ano Novo"),
    (4, 21, "Tiradentes"),
    (5, 1, "Dia do Trabalho"),
    (9, 7, "Independência"),
    (10, 12, "Nossa Sra. Aparecida"),
    (11, 2, "Finados"),
    (11, 15, "Proclamação da República"),
    (11, 20, "Consciência Negra"),
    (12, 25, "Natal"),
)

# (offset in days from Easter Sunday, name)
MOVABLE_NATIONAL_HOLIDAYS = (
    (-47, "Carnaval"),
    (-2, "Sexta-feira Santa"),
    (0, "Páscoa"),
    (60, "Corpus Christi"),
)


def easter_sunday(year: int) -> date:
    """
    Gregorian Easter Sunday (anonymous Gregorian / Meeus algorithm).

    >>> easter_sunday(2026)
    datetime.date(2026, 4, 5)
    """
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def national_holidays(year: int) -> List[HolidayDate]:
    """
    National holidays for a year, sorted by date.

    Holidays falling on the same date are merged into one entry with their
    names joined by " / " so the (organization, date, type) key stays unique.
    """
    by_date: Dict[date, List[str]] = {}

    for month, day, name in FIXED_NATIONAL_HOLIDAYS:
        by_date.setdefault(date(year, month, day), []).append(name)

    easter = easter_sunday(year)
    for offset, name in MOVABLE_NATIONAL_HOLIDAYS:
        by_date.setdefault(easter + timedelta(days=offset), []).append(name)

    return [HolidayDate(d, " / ".join(names)) for d, names in sorted(by_date.items())]


def national_holidays_for_years(years: Iterable[int]) -> List[HolidayDate]:
    """Concatenated national holidays for several years, sorted by date."""
    result: List[HolidayDate] = []
    for year in sorted(set(years)):
        result.extend(national_holidays(year))
    return result
