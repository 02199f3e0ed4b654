from __future__ import annotations

import logging
from collections.abc import Callable

from app.measurebook.modules.customers.service import CustomerRecord, Draft, format_errors, validate_draft
from app.measurebook.modules.customers.state import (
    CustomerBookState,
    begin_loading,
    customers_loaded,
    draft_changed,
    end_loading,
    fetch_failed,
    modal_closed,
    open_blank,
    open_for_customer,
    search_changed,
)
from app.measurebook.modules.customers.store import CustomerStore, StoreError

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


def _discard(message: str, category: str) -> None:
    return None


class CustomerBookController:
    """
    Orchestrates the customers screen: fetch, search, save, delete and the
    modal lifecycle. Holds the only copy of the screen state.

    Store failures are caught here, logged, and turned into a short
    notification; the loading flag is always cleared afterwards.

    Overlapping calls are not coordinated. Each successful fetch replaces the
    canonical list wholesale, so the last response wins.
    """

    def __init__(
        self,
        store: CustomerStore,
        *,
        notify: Notifier | None = None,
        state: CustomerBookState | None = None,
    ) -> None:
        self.store = store
        self.notify: Notifier = notify or _discard
        self.state = state or CustomerBookState()

    # --- queries -----------------------------------------------------------

    @property
    def view_list(self) -> list[CustomerRecord]:
        return self.state.view_list

    def find(self, customer_id: str) -> CustomerRecord | None:
        for c in self.state.customers:
            if c.id == customer_id:
                return c
        return None

    # --- remote operations -------------------------------------------------

    def fetch_all(self) -> bool:
        self.state = begin_loading(self.state)
        try:
            customers = self.store.list()
        except StoreError:
            logger.exception("Error fetching customers")
            self.state = fetch_failed(self.state)
            self.notify("Error fetching customers", "danger")
            return False
        else:
            self.state = customers_loaded(self.state, customers)
            return True
        finally:
            self.state = end_loading(self.state)

    def save(self, draft: Draft, *, refresh: bool = True) -> bool:
        """
        Insert the draft, or update the selected customer with all four fields.

        Pass refresh=False when the caller redirects to a page that fetches anyway.
        """
        self.state = draft_changed(self.state, draft)
        errs = validate_draft(draft)
        if errs:
            self.notify(format_errors(errs), "danger")
            return False

        selected = self.state.selected
        self.state = begin_loading(self.state)
        try:
            if selected is not None:
                self.store.update(selected.id, draft.to_payload())
                self.notify("Customer updated successfully", "success")
            else:
                self.store.insert(draft.to_payload())
                self.notify("Customer added successfully", "success")
        except StoreError:
            action = "updating" if selected is not None else "adding"
            logger.exception("Error %s customer (id=%s)", action, selected.id if selected else None)
            self.notify(f"Error {action} customer", "danger")
            return False
        finally:
            self.state = end_loading(self.state)

        self.state = modal_closed(self.state)
        if refresh:
            self.fetch_all()
        return True

    def delete(self, customer_id: str, confirm: Callable[[], bool], *, refresh: bool = True) -> bool:
        """Delete a customer. Irreversible, so `confirm` must return True first."""
        if not confirm():
            return False

        self.state = begin_loading(self.state)
        try:
            self.store.delete(customer_id)
            self.notify("Customer deleted successfully", "success")
        except StoreError:
            logger.exception("Error deleting customer (id=%s)", customer_id)
            self.notify("Error deleting customer", "danger")
            return False
        finally:
            self.state = end_loading(self.state)

        self.state = modal_closed(self.state)
        if refresh:
            self.fetch_all()
        return True

    # --- local transitions -------------------------------------------------

    def set_search(self, text: str) -> None:
        self.state = search_changed(self.state, text)

    def start_edit(self, customer: CustomerRecord) -> None:
        self.state = open_for_customer(self.state, customer)

    # Viewing opens the same editable modal as editing.
    start_view = start_edit

    def start_create(self) -> None:
        self.state = open_blank(self.state)

    def close_modal(self) -> None:
        self.state = modal_closed(self.state)
