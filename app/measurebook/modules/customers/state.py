"""
Screen state for the customers page and its pure transitions.

Every transition takes the old state and returns a new one; nothing here
touches the record store.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from app.measurebook.modules.customers.service import CustomerRecord, Draft, filter_customers


@dataclass(frozen=True)
class CustomerBookState:
    customers: tuple[CustomerRecord, ...] = ()
    search_text: str = ""
    loading: bool = False
    load_failed: bool = False
    selected: CustomerRecord | None = None
    modal_open: bool = False
    draft: Draft = field(default_factory=Draft.empty)

    @property
    def view_list(self) -> list[CustomerRecord]:
        return filter_customers(self.customers, self.search_text)

    @property
    def is_editing(self) -> bool:
        return self.selected is not None


def begin_loading(state: CustomerBookState) -> CustomerBookState:
    return replace(state, loading=True)


def end_loading(state: CustomerBookState) -> CustomerBookState:
    return replace(state, loading=False)


def customers_loaded(state: CustomerBookState, customers: list[CustomerRecord]) -> CustomerBookState:
    return replace(state, customers=tuple(customers), load_failed=False)


def fetch_failed(state: CustomerBookState) -> CustomerBookState:
    # The previous list is kept; the flag only tells the screen nothing fresh arrived.
    return replace(state, load_failed=True)


def search_changed(state: CustomerBookState, text: str) -> CustomerBookState:
    return replace(state, search_text=text)


def draft_changed(state: CustomerBookState, draft: Draft) -> CustomerBookState:
    return replace(state, draft=draft)


def open_for_customer(state: CustomerBookState, customer: CustomerRecord) -> CustomerBookState:
    # Used for both "view" and "edit": the modal is always editable.
    return replace(state, selected=customer, draft=Draft.from_customer(customer), modal_open=True)


def open_blank(state: CustomerBookState) -> CustomerBookState:
    return replace(state, selected=None, draft=Draft.empty(), modal_open=True)


def modal_closed(state: CustomerBookState) -> CustomerBookState:
    return replace(state, selected=None, draft=Draft.empty(), modal_open=False)
