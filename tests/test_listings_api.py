from app.models import AvailabilitySlot

from helpers import auth_headers, listing_payload, make_token


def slot_times(body):
    return [slot["slot_time"] for slot in body["slots"]]


def test_create_listing_sorts_slots(listing):
    times = slot_times(listing)
    assert len(times) == 2
    assert times == sorted(times)
    assert listing["salon"]["salon_name"] == "Salon Aoyama"
    assert listing["is_available"]
    assert len(listing["bookable_slots"]) == 2


def test_create_listing_requires_slots_or_flexible_text(client, salon):
    response = client.post("/listings", json=listing_payload(available_dates=[]), headers=salon)
    assert response.status_code == 422

    response = client.post(
        "/listings",
        json=listing_payload(available_dates=[], flexible_schedule_text="Weekday evenings"),
        headers=salon,
    )
    assert response.status_code == 201
    assert response.json()["accepts_flexible_schedule"]


def test_paid_listing_needs_amount(client, salon):
    response = client.post("/listings", json=listing_payload(payment_type="paid"), headers=salon)
    assert response.status_code == 422

    response = client.post(
        "/listings", json=listing_payload(payment_type="paid", payment_amount=3000), headers=salon
    )
    assert response.status_code == 201
    assert response.json()["payment_amount"] == 3000


def test_duplicate_slots_in_create_are_rejected(client, salon):
    dates = [{"datetime": "2025-06-05T10:00:00+09:00"}, {"datetime": "2025-06-05T01:00:00Z"}]
    response = client.post("/listings", json=listing_payload(available_dates=dates), headers=salon)
    assert response.status_code == 400
    assert "already been added" in response.json()["detail"]


def test_students_cannot_create_listings(client, student):
    response = client.post("/listings", json=listing_payload(), headers=student)
    assert response.status_code == 403


def test_missing_token_is_401(client):
    response = client.post("/listings", json=listing_payload())
    assert response.status_code in (401, 403)


def test_public_list_filters(client, salon, listing):
    client.post(
        "/listings",
        json=listing_payload(title="Color model", menus=["color"], gender_requirement="any"),
        headers=salon,
    )

    everything = client.get("/listings").json()
    assert len(everything) == 2

    cut_only = client.get("/listings", params={"menus": "cut"}).json()
    assert [item["id"] for item in cut_only] == [listing["id"]]

    female = client.get("/listings", params={"gender": "female"}).json()
    assert [item["id"] for item in female] == [listing["id"]]


def test_closed_listings_are_hidden(client, salon, listing):
    response = client.patch(
        f"/listings/{listing['id']}/status", json={"status": "closed", "confirm": True}, headers=salon
    )
    assert response.status_code == 200
    assert client.get("/listings").json() == []
    assert client.get(f"/listings/{listing['id']}").status_code == 404
    assert client.get(f"/listings/{listing['id']}", headers=salon).status_code == 200


def test_status_change_requires_confirmation(client, salon, listing):
    response = client.patch(f"/listings/{listing['id']}/status", json={"status": "closed"}, headers=salon)
    assert response.status_code == 400


def test_add_and_remove_slot(client, salon, listing):
    response = client.post(
        f"/listings/{listing['id']}/slots", json={"date": "2025-06-03", "time": "09:30"}, headers=salon
    )
    assert response.status_code == 201
    body = response.json()
    assert len(body["slots"]) == 3
    assert slot_times(body) == sorted(slot_times(body))

    duplicate = client.post(
        f"/listings/{listing['id']}/slots", json={"date": "2025-06-03", "time": "09:30"}, headers=salon
    )
    assert duplicate.status_code == 409

    first = body["slots"][0]
    response = client.delete(f"/listings/{listing['id']}/slots/{first['id']}", headers=salon)
    assert response.status_code == 200
    assert len(response.json()["slots"]) == 2


def test_edit_that_drops_booked_slot_is_rejected(client, salon, student, listing, db):
    booked = listing["slots"][0]
    response = client.post(
        "/reservations",
        json={"listing_id": listing["id"], "reservation_datetime": booked["slot_time"]},
        headers=student,
    )
    assert response.status_code == 201

    other = listing["slots"][1]
    response = client.patch(
        f"/listings/{listing['id']}",
        json={"title": "Renamed", "available_dates": [{"datetime": other["slot_time"]}]},
        headers=salon,
    )
    assert response.status_code == 409
    assert "Booked slots cannot be removed" in response.json()["detail"]

    rows = db.query(AvailabilitySlot).filter(AvailabilitySlot.listing_id == listing["id"]).all()
    assert len(rows) == 2
    assert sum(row.is_booked for row in rows) == 1
    assert client.get(f"/listings/{listing['id']}").json()["title"] == "Cut model wanted"


def test_edit_keeping_booked_slot_replaces_the_rest(client, salon, student, listing):
    booked = listing["slots"][0]
    client.post(
        "/reservations",
        json={"listing_id": listing["id"], "reservation_datetime": booked["slot_time"]},
        headers=student,
    )

    response = client.patch(
        f"/listings/{listing['id']}",
        json={
            "available_dates": [
                {"datetime": "2025-06-10T11:00:00+09:00"},
                {"datetime": booked["slot_time"]},
            ]
        },
        headers=salon,
    )
    assert response.status_code == 200
    slots = response.json()["slots"]
    assert len(slots) == 2
    assert slots[0]["id"] == booked["id"]
    assert slots[0]["is_booked"]


def test_booked_slot_cannot_be_deleted(client, salon, student, listing):
    booked = listing["slots"][0]
    client.post(
        "/reservations",
        json={"listing_id": listing["id"], "reservation_datetime": booked["slot_time"]},
        headers=student,
    )
    response = client.delete(f"/listings/{listing['id']}/slots/{booked['id']}", headers=salon)
    assert response.status_code == 409


def test_only_owner_can_edit(client, listing):
    intruder = auth_headers(make_token("salon-2", "other@salon.test", "salon", salon_name="Other"))
    response = client.patch(f"/listings/{listing['id']}", json={"title": "Mine now"}, headers=intruder)
    assert response.status_code == 403


def test_delete_listing_cascades(client, salon, student, listing):
    client.post(
        "/reservations",
        json={"listing_id": listing["id"], "reservation_datetime": listing["slots"][0]["slot_time"]},
        headers=student,
    )
    assert client.delete(f"/listings/{listing['id']}", headers=salon).status_code == 400

    response = client.delete(f"/listings/{listing['id']}", params={"confirm": True}, headers=salon)
    assert response.status_code == 200
    assert response.json()["deletedReservations"] == 1
    assert client.get("/reservations", headers=student).json() == []


def test_validate_step(client):
    response = client.post("/listings/validate-step", json={"step": "compensation", "data": {"payment_type": "paid"}})
    assert response.json() == {
        "step": "compensation",
        "valid": False,
        "errors": ["Paid listings need a payment amount greater than 0"],
    }
    response = client.post("/listings/validate-step", json={"step": "info", "data": {"title": "x", "menus": ["cut"]}})
    assert response.json()["valid"]


def test_detail_splits_bookable_and_consult_slots(client, salon):
    dates = [{"datetime": "2025-06-02T14:00:00+09:00"}, {"datetime": "2025-06-05T10:00:00+09:00"}]
    created = client.post("/listings", json=listing_payload(available_dates=dates), headers=salon).json()
    assert len(created["bookable_slots"]) == 1
    assert len(created["consult_slots"]) == 1
    assert created["consult_slots"][0]["slot_time"] < created["bookable_slots"][0]["slot_time"]
