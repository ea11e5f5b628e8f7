# -*- coding: utf-8 -*-
"""
backend/app/modules/analytics/date_range.py

Resolución de la ventana de fechas de analytics (días UTC).

- `to` omitido → día UTC actual
- `from` omitido → `to` - 29 días (ventana de 30 días inclusiva)
- Acepta YYYY-MM-DD; un datetime ISO-8601 completo se trunca a su día UTC

Autor: Equipo IMM
Fecha: 2025-10-24
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from .errors import AnalyticsValidationError

DEFAULT_RANGE_DAYS = 30

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class DateRange:
    from_: date
    to: date

    @property
    def from_iso(self) -> str:
        return self.from_.isoformat()

    @property
    def to_iso(self) -> str:
        return self.to.isoformat()


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _parse_day(value: str, field: str) -> date:
    raw = value.strip()
    try:
        if _DATE_RE.match(raw):
            return date.fromisoformat(raw)
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError as e:
        raise AnalyticsValidationError(
            "Invalid date format. Use YYYY-MM-DD.",
            {field: ["Invalid date format. Use YYYY-MM-DD."]},
        ) from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def resolve_date_range(
    from_: Optional[str] = None,
    to: Optional[str] = None,
    *,
    today: Optional[date] = None,
) -> DateRange:
    """
    Resuelve la ventana [from, to] en días UTC.

    Raises:
        AnalyticsValidationError: fecha no parseable o from > to.
    """
    to_day = _parse_day(to, "to") if to else (today or _utc_today())
    from_day = (
        _parse_day(from_, "from")
        if from_
        else to_day - timedelta(days=DEFAULT_RANGE_DAYS - 1)
    )

    if from_day > to_day:
        raise AnalyticsValidationError(
            "Invalid date range: `from` must be before `to`.",
            {"from": ["must be on or before `to`"]},
        )

    return DateRange(from_=from_day, to=to_day)


__all__ = ["DateRange", "DEFAULT_RANGE_DAYS", "resolve_date_range"]

# Fin del archivo backend/app/modules/analytics/date_range.py
