from app.models import AvailabilitySlot, Listing


def test_admin_area_requires_allow_listed_email(client, salon):
    assert client.get("/admin/tables", headers=salon).status_code == 403


def test_list_tables(client, admin):
    tables = client.get("/admin/tables", headers=admin).json()
    assert [table["key"] for table in tables] == [
        "students",
        "salons",
        "listings",
        "available_slots",
        "reservations",
        "reservation_messages",
    ]
    assert "slot_time" in tables[3]["columns"]


def test_list_rows_sorted(client, admin, listing):
    body = client.get(
        "/admin/tables/available_slots/rows", params={"direction": "asc"}, headers=admin
    ).json()
    assert body["table"] == "available_slots"
    times = [row["slot_time"] for row in body["rows"]]
    assert len(times) == 2
    assert times == sorted(times)


def test_unknown_table_and_column(client, admin):
    assert client.get("/admin/tables/payments/rows", headers=admin).status_code == 404
    response = client.get("/admin/tables/listings/rows", params={"sort": "password"}, headers=admin)
    assert response.status_code == 400


def test_delete_row_requires_confirmation(client, admin, listing, db):
    url = f"/admin/tables/listings/rows/{listing['id']}"
    assert client.delete(url, headers=admin).status_code == 400

    response = client.delete(url, params={"confirm": True}, headers=admin)
    assert response.status_code == 200
    db.expire_all()
    assert db.query(Listing).count() == 0
    assert db.query(AvailabilitySlot).count() == 0

    assert client.delete(url, params={"confirm": True}, headers=admin).status_code == 404
