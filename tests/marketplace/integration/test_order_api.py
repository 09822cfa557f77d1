"""Integration tests for the order endpoints."""

import pytest


def _as(user_id):
    return {"X-User-Id": user_id}


@pytest.fixture()
def order_id(client, parties):
    response = client.post(
        "/orders",
        json={
            "fulfiller_id": parties.fulfiller_id,
            "items": [
                {"item_id": parties.rice_id, "quantity": 25},
                {"item_id": parties.dal_id, "quantity": 4},
            ],
            "delivery_note": "Gate 2",
        },
        headers=_as(parties.requester_id),
    )
    assert response.status_code == 201
    return response.json()["order_id"]


class TestCreateOrder:
    def test_created_order_body(self, client, parties, order_id):
        body = client.get(f"/orders/{order_id}", headers=_as(parties.requester_id)).json()
        assert body["status"] == "pending"
        assert body["requester_id"] == parties.requester_id
        assert body["total_amount"] == 2482.0
        assert body["currency"] == "INR"
        assert body["payment_status"] == "pending"
        assert body["delivery_note"] == "Gate 2"
        assert [line["line_total"] for line in body["items"]] == [2000.0, 482.0]
        assert [entry["status"] for entry in body["status_history"]] == ["pending"]

    def test_empty_items(self, client, parties):
        response = client.post(
            "/orders", json={"fulfiller_id": parties.fulfiller_id, "items": []}, headers=_as(parties.requester_id)
        )
        assert response.status_code == 422

    def test_below_minimum_quantity(self, client, parties):
        response = client.post(
            "/orders",
            json={"fulfiller_id": parties.fulfiller_id, "items": [{"item_id": parties.rice_id, "quantity": 2}]},
            headers=_as(parties.requester_id),
        )
        assert response.status_code == 422
        assert response.json()["error"] == "quantity_too_low"

    def test_unknown_item(self, client, parties):
        response = client.post(
            "/orders",
            json={"fulfiller_id": parties.fulfiller_id, "items": [{"item_id": "nope", "quantity": 2}]},
            headers=_as(parties.requester_id),
        )
        assert response.status_code == 422
        assert response.json()["error"] == "invalid_item"

    def test_actor_header_is_required(self, client, parties):
        response = client.post(
            "/orders",
            json={"fulfiller_id": parties.fulfiller_id, "items": [{"item_id": parties.dal_id, "quantity": 1}]},
        )
        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "validation_error"
        assert "x-user-id" in body["details"]


class TestTransitions:
    def test_approve_then_dispatch_then_deliver(self, client, parties, order_id):
        fulfiller = _as(parties.fulfiller_id)
        assert client.put(f"/orders/{order_id}/approve", json={"note": "OK"}, headers=fulfiller).status_code == 200
        assert client.put(f"/orders/{order_id}/dispatch", headers=fulfiller).json()["status"] == "dispatched"
        body = client.put(f"/orders/{order_id}/deliver", headers=fulfiller).json()
        assert body["status"] == "delivered"
        assert len(body["status_history"]) == 4

    def test_reject_with_reason(self, client, parties, order_id):
        response = client.put(
            f"/orders/{order_id}/reject", json={"reason": "Out of stock"}, headers=_as(parties.fulfiller_id)
        )
        assert response.status_code == 200
        assert response.json()["rejection_reason"] == "Out of stock"

    def test_reject_without_reason(self, client, parties, order_id):
        response = client.put(f"/orders/{order_id}/reject", json={"reason": ""}, headers=_as(parties.fulfiller_id))
        assert response.status_code == 422

    def test_invalid_transition_is_conflict(self, client, parties, order_id):
        response = client.put(f"/orders/{order_id}/deliver", headers=_as(parties.fulfiller_id))
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "conflict"
        assert body["details"]["current_status"] == ["pending"]

    def test_requester_cancels(self, client, parties, order_id):
        response = client.put(
            f"/orders/{order_id}/cancel", json={"reason": "No longer needed"}, headers=_as(parties.requester_id)
        )
        assert response.json()["status"] == "cancelled"

    def test_requester_cannot_approve(self, client, parties, order_id):
        response = client.put(f"/orders/{order_id}/approve", headers=_as(parties.requester_id))
        assert response.status_code == 404

    def test_outsider_cannot_see_order(self, client, order_id):
        assert client.get(f"/orders/{order_id}", headers=_as("someone-else")).status_code == 404


class TestListOrders:
    def test_list_by_role_and_status(self, client, parties, order_id):
        requester = _as(parties.requester_id)
        assert [o["order_id"] for o in client.get("/orders?role=requester", headers=requester).json()] == [order_id]
        assert client.get("/orders?role=requester&status=approved", headers=requester).json() == []
        assert client.get("/orders?role=fulfiller", headers=requester).json() == []

    def test_bad_role(self, client, parties):
        response = client.get("/orders?role=admin", headers=_as(parties.requester_id))
        assert response.status_code == 400

    def test_all_status(self, client, parties, order_id):
        response = client.get("/orders?role=requester&status=all", headers=_as(parties.requester_id))
        assert [o["order_id"] for o in response.json()] == [order_id]

    def test_paging(self, client, parties, order_id):
        requester = _as(parties.requester_id)
        assert len(client.get("/orders?role=requester&limit=1&page=1", headers=requester).json()) == 1
        assert client.get("/orders?role=requester&limit=1&page=2", headers=requester).json() == []

    @pytest.mark.parametrize("query", ["limit=0", "limit=101", "page=0"])
    def test_paging_out_of_range(self, client, parties, query):
        response = client.get(f"/orders?role=requester&{query}", headers=_as(parties.requester_id))
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"
