"""Route tests for the customers screen (SQL store on a temporary SQLite database)."""

from app.measurebook.db import session_scope
from app.measurebook.modules.customers.models import Customer

from fakes import FakeStore


def _rows(app) -> dict[str, Customer]:
    with session_scope(app) as s:
        return {c.id: c for c in s.query(Customer).all()}


def test_index_lists_newest_first(client):
    r = client.get("/?vw=1280")
    assert r.status_code == 200
    assert b"Customer Measurements" in r.data
    assert r.data.index(b"Alice") < r.data.index(b"Bob")
    assert b'id="modal-title"' not in r.data


def test_index_search_filters(client):
    r = client.get("/?q=555-0002")
    assert b"Bob" in r.data
    assert b"Alice" not in r.data


def test_index_no_matches_shows_empty_state(client):
    r = client.get("/?q=zzz")
    assert b"No customers found" in r.data


def test_new_opens_blank_modal(client):
    r = client.get("/customers/new")
    assert r.status_code == 200
    assert b"Customer Details" in r.data
    assert b'name="customer_id"' not in r.data
    assert b'id="name" name="name" required value=""' in r.data


def test_detail_opens_prefilled_editable_modal(client):
    r = client.get("/customers/c-bob")
    assert r.status_code == 200
    assert b"Edit Customer" in r.data
    assert b'value="c-bob"' in r.data
    assert b'value="Chest: 42"' in r.data
    assert b"Save Changes" in r.data


def test_detail_unknown_redirects(client):
    r = client.get("/customers/missing", follow_redirects=True)
    assert r.status_code == 200
    assert b"Customer not found." in r.data


def test_create_customer(client, seeded_app, csrf):
    token = csrf(client)
    r = client.post(
        "/customers/save",
        data={"csrf_token": token, "name": "Cara", "shirt": "Chest:38", "pants": "Waist:30", "phone": ""},
        follow_redirects=True,
    )
    assert r.status_code == 200
    assert b"Customer added successfully" in r.data
    rows = _rows(seeded_app)
    assert len(rows) == 3
    cara = next(c for c in rows.values() if c.name == "Cara")
    assert cara.shirt == "Chest:38" and cara.pants == "Waist:30" and cara.phone == ""
    assert cara.id and cara.created_at is not None
    # Newest first.
    assert r.data.index(b"Cara") < r.data.index(b"Alice")


def test_update_customer_keeps_id(client, seeded_app, csrf):
    token = csrf(client)
    r = client.post(
        "/customers/save",
        data={
            "csrf_token": token,
            "customer_id": "c-bob",
            "name": "Bob",
            "shirt": "Chest: 42",
            "pants": "Waist: 34",
            "phone": "555-7777",
        },
        follow_redirects=True,
    )
    assert b"Customer updated successfully" in r.data
    rows = _rows(seeded_app)
    assert len(rows) == 2
    assert rows["c-bob"].phone == "555-7777"


def test_missing_required_field_keeps_modal_open(client, seeded_app, csrf):
    token = csrf(client)
    r = client.post(
        "/customers/save",
        data={"csrf_token": token, "name": "", "shirt": "Chest:38", "pants": "Waist:30", "phone": "123"},
    )
    assert r.status_code == 200
    assert b"name: Name is required." in r.data
    assert b'id="modal-title"' in r.data
    assert b'value="Chest:38"' in r.data
    assert len(_rows(seeded_app)) == 2


def test_post_without_csrf_is_rejected(client, seeded_app):
    r = client.post("/customers/save", data={"name": "Eve", "shirt": "s", "pants": "p"})
    assert r.status_code == 400
    assert len(_rows(seeded_app)) == 2


def test_delete_asks_for_confirmation(client):
    r = client.get("/customers/c-alice/delete")
    assert r.status_code == 200
    assert b"Are you sure you want to delete this customer?" in r.data


def test_delete_without_confirmation_keeps_row(client, seeded_app, csrf):
    token = csrf(client)
    r = client.post("/customers/c-alice/delete", data={"csrf_token": token})
    assert r.status_code == 302
    assert "c-alice" in _rows(seeded_app)


def test_confirmed_delete_removes_row(client, seeded_app, csrf):
    token = csrf(client)
    r = client.post("/customers/c-alice/delete", data={"csrf_token": token, "confirmed": "yes"}, follow_redirects=True)
    assert b"Customer deleted successfully" in r.data
    assert "c-alice" not in _rows(seeded_app)


def test_delete_unknown_reports_error(client, csrf):
    token = csrf(client)
    r = client.post("/customers/nope/delete", data={"csrf_token": token, "confirmed": "yes"}, follow_redirects=True)
    assert b"Error deleting customer" in r.data


def test_insert_failure_keeps_draft(seeded_app, alice_bob, csrf):
    seeded_app.extensions["customer_store"] = FakeStore(alice_bob, fail={"insert"})
    client = seeded_app.test_client()
    token = csrf(client)
    r = client.post(
        "/customers/save",
        data={"csrf_token": token, "name": "Cara", "shirt": "Chest:38", "pants": "Waist:30", "phone": ""},
    )
    assert r.status_code == 200
    assert b"Error adding customer" in r.data
    assert b'value="Cara"' in r.data
    assert b"Customer Details" in r.data


def test_fetch_failure_shows_load_error_not_empty_state(seeded_app):
    seeded_app.extensions["customer_store"] = FakeStore(fail={"list"})
    r = seeded_app.test_client().get("/")
    assert r.status_code == 200
    assert b"Error fetching customers" in r.data
    assert b"Could not load customers" in r.data
    assert b"No customers found" not in r.data


def test_list_fragment_failure_returns_503_without_markup(seeded_app, alice_bob):
    store = FakeStore(alice_bob)
    seeded_app.extensions["customer_store"] = store
    client = seeded_app.test_client()
    assert client.get("/customers/list?q=a&vw=1280").status_code == 200

    store.fail.add("list")
    r = client.get("/customers/list?q=a&vw=1280")
    assert r.status_code == 503
    assert r.data == b"Error fetching customers"
    with client.session_transaction() as sess:
        assert not sess.get("_flashes")


def test_update_failure_after_fetch_failure_keeps_draft(seeded_app, alice_bob, csrf):
    store = FakeStore(alice_bob, fail={"list", "update"})
    seeded_app.extensions["customer_store"] = store
    client = seeded_app.test_client()
    token = csrf(client)
    r = client.post(
        "/customers/save",
        data={"csrf_token": token, "customer_id": "2", "name": "Bob", "shirt": "Chest: 40",
              "pants": "Waist: 32", "phone": "555-9999"},
    )
    assert r.status_code == 200
    assert store.ops() == ["list", "update"]
    assert b"Error updating customer" in r.data
    assert b"Customer not found." not in r.data
    assert b"Edit Customer" in r.data
    assert b'value="555-9999"' in r.data
    assert b'name="customer_id" value="2"' in r.data


def test_update_goes_through_when_only_the_fetch_failed(seeded_app, alice_bob, csrf):
    store = FakeStore(alice_bob, fail={"list"})
    seeded_app.extensions["customer_store"] = store
    client = seeded_app.test_client()
    token = csrf(client)
    r = client.post(
        "/customers/save",
        data={"csrf_token": token, "customer_id": "2", "name": "Bob", "shirt": "Chest: 40",
              "pants": "Waist: 32", "phone": "555-9999"},
    )
    assert r.status_code == 302
    assert store.ops() == ["list", "update"]
    assert next(c for c in store.rows if c.id == "2").phone == "555-9999"


def test_update_unknown_id_reports_error(client, csrf):
    token = csrf(client)
    r = client.post(
        "/customers/save",
        data={"csrf_token": token, "customer_id": "nope", "name": "Zed", "shirt": "s", "pants": "p"},
    )
    assert r.status_code == 200
    assert b"Error updating customer" in r.data
    assert b'value="Zed"' in r.data
