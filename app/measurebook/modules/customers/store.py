from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.measurebook.db import db_session
from app.measurebook.modules.customers.models import Customer
from app.measurebook.modules.customers.service import DRAFT_FIELDS, CustomerRecord

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    pass


class CustomerNotFound(StoreError):
    pass


def _writable(payload: Mapping[str, Any]) -> dict[str, str]:
    # id and created_at belong to the store.
    return {k: str(payload.get(k) or "") for k in DRAFT_FIELDS if k in payload}


class CustomerStore:
    """
    Record store contract. Every method either returns or raises StoreError.
    """

    def list(self) -> list[CustomerRecord]:
        raise NotImplementedError

    def insert(self, payload: Mapping[str, Any]) -> CustomerRecord:
        raise NotImplementedError

    def update(self, customer_id: str, payload: Mapping[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, customer_id: str) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class SqlCustomerStore(CustomerStore):
    get_session: Callable[[], Session] = db_session

    def list(self) -> list[CustomerRecord]:
        s = self.get_session()
        try:
            rows = s.execute(select(Customer).order_by(Customer.created_at.desc())).scalars().all()
        except SQLAlchemyError as e:
            raise StoreError(f"Could not list customers: {e}") from e
        return [CustomerRecord.from_row(r) for r in rows]

    def insert(self, payload: Mapping[str, Any]) -> CustomerRecord:
        s = self.get_session()
        try:
            c = Customer(**_writable(payload))
            s.add(c)
            s.commit()
        except SQLAlchemyError as e:
            s.rollback()
            raise StoreError(f"Could not insert customer: {e}") from e
        return CustomerRecord.from_row(c)

    def update(self, customer_id: str, payload: Mapping[str, Any]) -> None:
        s = self.get_session()
        try:
            c = s.get(Customer, customer_id)
            if c is None:
                raise CustomerNotFound(f"Customer {customer_id} not found")
            for key, value in _writable(payload).items():
                setattr(c, key, value)
            s.commit()
        except SQLAlchemyError as e:
            s.rollback()
            raise StoreError(f"Could not update customer {customer_id}: {e}") from e

    def delete(self, customer_id: str) -> None:
        s = self.get_session()
        try:
            c = s.get(Customer, customer_id)
            if c is None:
                raise CustomerNotFound(f"Customer {customer_id} not found")
            s.delete(c)
            s.commit()
        except SQLAlchemyError as e:
            s.rollback()
            raise StoreError(f"Could not delete customer {customer_id}: {e}") from e


@dataclass(frozen=True)
class RestCustomerStore(CustomerStore):
    """
    Hosted table API speaking the PostgREST dialect (e.g. a Supabase project's
    /rest/v1 endpoint). No retries: a failed call is reported once.
    """

    base_url: str
    api_key: str
    table: str = "customers"
    timeout_seconds: int = 15

    def _url(self, params: dict[str, str] | None = None) -> str:
        url = self.base_url.rstrip("/") + "/" + urllib.parse.quote(self.table)
        if params:
            url += "?" + urllib.parse.urlencode(params)
        return url

    def _id_filter(self, customer_id: str) -> dict[str, str]:
        return {"id": f"eq.{customer_id}"}

    def request_json(self, method: str, url: str, *, body: Any = None) -> Any:
        data = json.dumps(body).encode("utf-8") if body is not None else None
        req = urllib.request.Request(url, data=data, method=method)
        req.add_header("apikey", self.api_key)
        req.add_header("Authorization", f"Bearer {self.api_key}")
        req.add_header("Accept", "application/json")
        req.add_header("Prefer", "return=representation")
        if data is not None:
            req.add_header("Content-Type", "application/json")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_seconds) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            try:
                detail = e.read().decode("utf-8", errors="ignore")
            except Exception:
                detail = ""
            raise StoreError(f"HTTP {e.code} from record store: {detail[:300]}") from e
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            raise StoreError(f"Record store unreachable: {e}") from e
        if not raw:
            return None
        try:
            return json.loads(raw.decode("utf-8"))
        except ValueError as e:
            raise StoreError(f"Invalid JSON from record store ({method} {self.table})") from e

    def _rows(self, value: Any) -> list[dict[str, Any]]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise StoreError("Unexpected response shape from record store")
        return [r for r in value if isinstance(r, dict)]

    def list(self) -> list[CustomerRecord]:
        rows = self._rows(self.request_json("GET", self._url({"select": "*", "order": "created_at.desc"})))
        return [CustomerRecord.from_json(r) for r in rows]

    def insert(self, payload: Mapping[str, Any]) -> CustomerRecord:
        rows = self._rows(self.request_json("POST", self._url(), body=[_writable(payload)]))
        if not rows:
            raise StoreError("Record store returned no row for insert")
        return CustomerRecord.from_json(rows[0])

    def update(self, customer_id: str, payload: Mapping[str, Any]) -> None:
        rows = self._rows(self.request_json("PATCH", self._url(self._id_filter(customer_id)), body=_writable(payload)))
        if not rows:
            raise CustomerNotFound(f"Customer {customer_id} not found")

    def delete(self, customer_id: str) -> None:
        rows = self._rows(self.request_json("DELETE", self._url(self._id_filter(customer_id))))
        if not rows:
            raise CustomerNotFound(f"Customer {customer_id} not found")


def store_from_config(config: Mapping[str, Any]) -> CustomerStore:
    backend = (config.get("STORE_BACKEND") or "sql").strip().lower()
    if backend == "rest":
        url = (config.get("STORE_REST_URL") or "").strip()
        key = (config.get("STORE_REST_KEY") or "").strip()
        if not url or not key:
            raise StoreError("STORE_REST_URL and STORE_REST_KEY are required for the rest store backend.")
        return RestCustomerStore(
            base_url=url,
            api_key=key,
            table=(config.get("STORE_TABLE") or "customers").strip(),
            timeout_seconds=int(config.get("STORE_TIMEOUT_SECONDS") or 15),
        )
    if backend != "sql":
        logger.warning("Unknown STORE_BACKEND %r; falling back to sql", backend)
    return SqlCustomerStore()
