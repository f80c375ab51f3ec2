from helpers import make_token


def book(client, headers, listing, index):
    response = client.post(
        "/reservations",
        json={"listing_id": listing["id"], "reservation_datetime": listing["slots"][index]["slot_time"]},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["reservation"]


def confirm(client, salon, reservation):
    response = client.patch(
        f"/reservations/{reservation['id']}/status", json={"status": "confirmed", "confirm": True}, headers=salon
    )
    assert response.status_code == 200


def test_dashboard_buckets_reservations(client, student, other_student, salon, listing):
    pending = book(client, student, listing, 0)
    confirmed = book(client, other_student, listing, 1)
    confirm(client, salon, confirmed)

    body = client.get("/dashboard", headers=salon).json()
    assert body["user_type"] == "salon"
    assert body["profile"]["salon_name"] == "Salon Aoyama"
    assert [item["id"] for item in body["listings"]] == [listing["id"]]
    assert [r["id"] for r in body["reservations"]["pending"]] == [pending["id"]]
    assert [r["id"] for r in body["reservations"]["confirmed"]] == [confirmed["id"]]
    assert body["reservations"]["other"] == []

    student_view = client.get("/dashboard", headers=student).json()
    assert student_view["listings"] == []
    assert [r["id"] for r in student_view["reservations"]["pending"]] == [pending["id"]]


def test_cancelled_reservations_go_to_other(client, student, salon, listing):
    reservation = book(client, student, listing, 0)
    client.patch(
        f"/reservations/{reservation['id']}/status",
        json={"status": "cancelled_by_salon", "confirm": True},
        headers=salon,
    )
    body = client.get("/dashboard", headers=student).json()
    assert [r["status"] for r in body["reservations"]["other"]] == ["cancelled_by_salon"]


def test_latest_message_and_unread_flag(client, student, salon, listing, clock):
    reservation = book(client, student, listing, 0)
    confirm(client, salon, reservation)

    client.post(f"/reservations/{reservation['id']}/messages", json={"message": "First"}, headers=salon)
    clock.advance(minutes=5)
    client.post(f"/reservations/{reservation['id']}/messages", json={"message": "Second"}, headers=salon)

    student_item = client.get("/dashboard", headers=student).json()["reservations"]["confirmed"][0]
    assert student_item["latest_message"]["message"] == "Second"
    assert student_item["has_unread"]

    salon_item = client.get("/dashboard", headers=salon).json()["reservations"]["confirmed"][0]
    assert salon_item["latest_message"]["message"] == "Second"
    assert not salon_item["has_unread"]


def test_pending_reservations_carry_no_chat_state(client, student, salon, listing):
    reservation = book(client, student, listing, 0)
    client.post(f"/reservations/{reservation['id']}/messages", json={"message": "Question"}, headers=student)

    item = client.get("/dashboard", headers=salon).json()["reservations"]["pending"][0]
    assert item["latest_message"] is None
    assert not item["has_unread"]


def test_stream_pushes_latest_message_changes(client, student, salon, listing, clock):
    reservation = book(client, student, listing, 0)
    confirm(client, salon, reservation)

    token = make_token("student-1", "hanako@example.ac.jp", "student", name="Hanako")
    with client.websocket_connect(f"/dashboard/stream?token={token}") as websocket:
        snapshot = websocket.receive_json()
        assert snapshot == {
            "type": "snapshot",
            "updates": [{"reservation_id": reservation["id"], "latest_message": None, "has_unread": False}],
        }

        clock.advance(minutes=1)
        client.post(f"/reservations/{reservation['id']}/messages", json={"message": "Reminder"}, headers=salon)

        frame = websocket.receive_json()
        assert frame["type"] == "latest_message"
        assert frame["reservation_id"] == reservation["id"]
        assert frame["latest_message"]["message"] == "Reminder"
        assert frame["has_unread"]


def test_stream_follows_reservations_confirmed_after_connecting(client, student, other_student, salon, listing, clock):
    first = book(client, student, listing, 0)
    confirm(client, salon, first)
    second = book(client, other_student, listing, 1)

    token = make_token("salon-1", "owner@salon.test", "salon", salon_name="Salon Aoyama")
    with client.websocket_connect(f"/dashboard/stream?token={token}") as websocket:
        snapshot = websocket.receive_json()
        assert [u["reservation_id"] for u in snapshot["updates"]] == [first["id"]]

        confirm(client, salon, second)
        refreshed = websocket.receive_json()
        assert refreshed["type"] == "snapshot"
        assert {u["reservation_id"] for u in refreshed["updates"]} == {first["id"], second["id"]}

        clock.advance(minutes=1)
        client.post(f"/reservations/{second['id']}/messages", json={"message": "See you"}, headers=other_student)

        frame = websocket.receive_json()
        assert frame["type"] == "latest_message"
        assert frame["reservation_id"] == second["id"]
        assert frame["latest_message"]["message"] == "See you"
        assert frame["has_unread"]
