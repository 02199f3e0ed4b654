from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import render_template

from app.measurebook.modules.customers.service import CustomerRecord

# Viewports narrower than this (logical px) get stacked cards instead of a table.
VIEWPORT_BREAKPOINT = 1024

LAYOUT_CARDS = "cards"
LAYOUT_TABLE = "table"

_TEMPLATES = {
    LAYOUT_CARDS: "customers/_cards.html",
    LAYOUT_TABLE: "customers/_table.html",
}


def parse_width(raw: Any) -> int | None:
    try:
        width = int(str(raw).strip())
    except (TypeError, ValueError):
        return None
    return width if width > 0 else None


def layout_for_width(width: int | None) -> str:
    if width is None:
        return LAYOUT_TABLE
    return LAYOUT_CARDS if width < VIEWPORT_BREAKPOINT else LAYOUT_TABLE


def viewport_width(args: Mapping[str, Any], cookies: Mapping[str, Any]) -> int | None:
    """Width reported by the browser: query string first, then the `vw` cookie."""
    return parse_width(args.get("vw")) or parse_width(cookies.get("vw"))


def render_customer_list(customers: list[CustomerRecord], layout: str, *, q: str = "") -> str:
    template = _TEMPLATES.get(layout, _TEMPLATES[LAYOUT_TABLE]) if customers else "customers/_empty.html"
    return render_template(template, customers=customers, layout=layout, q=q)
