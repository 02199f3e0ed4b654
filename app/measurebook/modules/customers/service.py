"""
Customer records: value types, form validation and the search filter.

Nothing in here talks to the record store; the controller owns that. These
helpers are pure so the routes, the controller and the tests can share them.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from app.measurebook.modules.customers.models import Customer

DRAFT_FIELDS = ("name", "shirt", "pants", "phone")
REQUIRED_FIELDS = ("name", "shirt", "pants")

_FIELD_LABELS = {
    "name": "Name",
    "shirt": "Shirt measurements",
    "pants": "Pants measurements",
}


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class CustomerRecord:
    id: str
    name: str
    shirt: str
    pants: str
    phone: str
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Customer) -> CustomerRecord:
        return cls(
            id=str(row.id),
            name=_text(row.name),
            shirt=_text(row.shirt),
            pants=_text(row.pants),
            phone=_text(row.phone),
            created_at=row.created_at,
        )

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> CustomerRecord:
        return cls(
            id=_text(data.get("id")),
            name=_text(data.get("name")),
            shirt=_text(data.get("shirt")),
            pants=_text(data.get("pants")),
            phone=_text(data.get("phone")),
            created_at=_parse_timestamp(data.get("created_at")),
        )


@dataclass(frozen=True)
class Draft:
    """In-progress field values for a customer being created or edited."""

    name: str = ""
    shirt: str = ""
    pants: str = ""
    phone: str = ""

    @classmethod
    def empty(cls) -> Draft:
        return cls()

    @classmethod
    def from_customer(cls, c: CustomerRecord) -> Draft:
        return cls(name=c.name, shirt=c.shirt, pants=c.pants, phone=c.phone)

    def to_payload(self) -> dict[str, str]:
        return {
            "name": self.name,
            "shirt": self.shirt,
            "pants": self.pants,
            "phone": self.phone,
        }


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str


def draft_from_form(form: Mapping[str, Any]) -> Draft:
    """Build a draft from submitted form values. Values are kept as typed."""
    return Draft(**{f: _text(form.get(f)) for f in DRAFT_FIELDS})


def validate_draft(draft: Draft) -> list[ValidationError]:
    errs: list[ValidationError] = []
    for field in REQUIRED_FIELDS:
        if not getattr(draft, field).strip():
            errs.append(ValidationError(field, f"{_FIELD_LABELS[field]} is required."))
    return errs


def format_errors(errs: Iterable[ValidationError]) -> str:
    return "; ".join(f"{e.field}: {e.message}" for e in errs)


def filter_customers(customers: Iterable[CustomerRecord], query: str) -> list[CustomerRecord]:
    """
    Keep customers whose name contains `query` (case-insensitive) or whose
    phone contains `query` verbatim. An empty query keeps everything, in order.
    """
    if not query:
        return list(customers)
    needle = query.lower()
    return [c for c in customers if needle in c.name.lower() or query in c.phone]
