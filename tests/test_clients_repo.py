import pytest

from atelier_ledger.database.errors import NotFoundError, ValidationError


def test_create_trims_and_stores_blank_optionals_as_null(conn, clients):
    cid = clients.create("  Ana Souza ", phone="   ", notes=" VIP ")
    c = clients.get(cid)
    assert c.name == "Ana Souza"
    assert c.phone is None
    assert c.notes == "VIP"
    raw = conn.execute("SELECT phone FROM clients WHERE client_id=?", (cid,)).fetchone()
    assert raw["phone"] is None


def test_name_is_required(clients):
    with pytest.raises(ValidationError):
        clients.create("   ")
    cid = clients.create("Bia")
    with pytest.raises(ValidationError):
        clients.update(cid, "")


def test_list_is_name_ordered_and_searchable(clients):
    clients.create("carla", phone="1199")
    clients.create("Ana", phone="2188")
    clients.create("Bruno")
    assert [c.name for c in clients.list_clients()] == ["Ana", "Bruno", "carla"]
    assert [c.name for c in clients.list_clients(search="an")] == ["Ana"]
    assert [c.name for c in clients.list_clients(search="1199")] == ["carla"]


def test_get_or_create_reuses_existing_name(clients):
    first, created = clients.get_or_create(" Dora ", phone="9")
    assert created
    again, created_again = clients.get_or_create("Dora")
    assert again == first and not created_again
    assert len(clients.list_clients()) == 1
    assert clients.find_by_name("Nobody") is None


def test_update_and_delete_missing_ids(clients):
    with pytest.raises(NotFoundError):
        clients.update(404, "X")
    with pytest.raises(NotFoundError):
        clients.delete(404)


def test_renaming_or_deleting_a_client_keeps_sales(clients, lifecycle, sales):
    cid = clients.create("Eva")
    sid = lifecycle.create_sale("2025-03-01", [{"description": "Caneca", "type": "OTHER", "value": 40}], "Eva")
    clients.update(cid, "Eva Lima")
    clients.delete(cid)
    assert clients.get(cid) is None
    assert sales.get(sid).client == "Eva"
