"""Jinja2 environment for the server-rendered pages."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional

from fastapi.templating import Jinja2Templates

from app.core.config import get_settings
from beachvb_shared.schemas.common import EVENT_STATUS_LABELS, EventStatus

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def initials(name: str) -> str:
    return "".join(part[0] for part in name.split() if part).upper()[:2]


def short_date(value: Optional[date | datetime], with_year: bool = True) -> str:
    if value is None:
        return ""
    label = f"{value:%b} {value.day}"
    return f"{label}, {value.year}" if with_year else label


def money(value: Optional[Decimal]) -> str:
    if value is None:
        return ""
    return f"${Decimal(value):.2f}"


def status_label(value: str) -> str:
    try:
        return EVENT_STATUS_LABELS[EventStatus(value)]
    except ValueError:
        return value.title()


templates.env.filters["initials"] = initials
templates.env.filters["short_date"] = short_date
templates.env.filters["money"] = money
templates.env.filters["status_label"] = status_label
templates.env.globals["csrf_cookie_name"] = get_settings().csrf_cookie_name
