"""Tests for the webhook HTTP API."""

from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from tests.conftest import make_delivery
from thirdplace.main import app


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


def _config_payload(**overrides):
    data = {
        "name": "Community CRM",
        "url": "https://example.com/webhooks",
        "events": ["user.joined_community"],
        "secret_key": "s3cr3t",
    }
    data.update(overrides)
    return data


class TestRoot:
    def test_health(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"
        assert response.json()["app"] == "thirdplace-webhooks"


class TestWebhookConfigurationsAPI:
    def test_create(self, client):
        response = client.post("/v1/webhook_configurations/", json=_config_payload())
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Community CRM"
        assert data["events"] == ["user.joined_community"]
        assert data["has_secret"] is True
        assert data["is_active"] is True
        assert "secret_key" not in data

    def test_create_unknown_event(self, client):
        response = client.post(
            "/v1/webhook_configurations/",
            json=_config_payload(events=["invoice.created"]),
        )
        assert response.status_code == 422

    def test_create_invalid_url(self, client):
        response = client.post(
            "/v1/webhook_configurations/", json=_config_payload(url="not-a-url")
        )
        assert response.status_code == 422

    def test_list(self, client, active_config, inactive_config):
        response = client.get("/v1/webhook_configurations/")
        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "2"
        assert len(response.json()) == 2

    def test_get(self, client, active_config):
        response = client.get(f"/v1/webhook_configurations/{active_config.id}")
        assert response.status_code == 200
        assert response.json()["id"] == str(active_config.id)

    def test_get_not_found(self, client):
        response = client.get(f"/v1/webhook_configurations/{uuid4()}")
        assert response.status_code == 404

    def test_update(self, client, active_config):
        response = client.put(
            f"/v1/webhook_configurations/{active_config.id}",
            json={"is_active": False, "events": ["user.posted_comment"]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["is_active"] is False
        assert data["events"] == ["user.posted_comment"]
        assert data["has_secret"] is True

    def test_update_not_found(self, client):
        response = client.put(f"/v1/webhook_configurations/{uuid4()}", json={"name": "x"})
        assert response.status_code == 404

    def test_delete(self, client, active_config):
        response = client.delete(f"/v1/webhook_configurations/{active_config.id}")
        assert response.status_code == 204
        assert client.get(f"/v1/webhook_configurations/{active_config.id}").status_code == 404

    def test_delete_not_found(self, client):
        response = client.delete(f"/v1/webhook_configurations/{uuid4()}")
        assert response.status_code == 404

    def test_send_test(self, client, active_config):
        response = client.post(f"/v1/webhook_configurations/{active_config.id}/test")
        assert response.status_code == 201
        data = response.json()
        assert data["event_type"] == "webhook.test"
        assert data["status"] == "pending"
        assert data["payload"]["test"] is True

    def test_send_test_inactive(self, client, inactive_config):
        response = client.post(f"/v1/webhook_configurations/{inactive_config.id}/test")
        assert response.status_code == 400

    def test_send_test_not_found(self, client):
        response = client.post(f"/v1/webhook_configurations/{uuid4()}/test")
        assert response.status_code == 404

    def test_delivery_stats(self, client, db_session, active_config):
        make_delivery(db_session, active_config, status="delivered", attempts=1)
        make_delivery(db_session, active_config, status="failed", attempts=3)

        response = client.get("/v1/webhook_configurations/delivery_stats")
        assert response.status_code == 200
        stats = response.json()
        assert len(stats) == 1
        assert stats[0]["webhook_config_id"] == str(active_config.id)
        assert stats[0]["total"] == 2
        assert stats[0]["delivered"] == 1
        assert stats[0]["failed"] == 1
        assert stats[0]["success_rate"] == 50.0


class TestWebhookDeliveriesAPI:
    def test_list_newest_first(self, client, db_session, active_config):
        old = make_delivery(db_session, active_config, age_seconds=60)
        new = make_delivery(db_session, active_config, age_seconds=5)

        response = client.get("/v1/webhook_deliveries/")
        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "2"
        assert [d["id"] for d in response.json()] == [str(new.id), str(old.id)]

    def test_list_filters(self, client, db_session, active_config, unsigned_config):
        make_delivery(db_session, active_config, status="failed", attempts=3)
        make_delivery(db_session, unsigned_config)

        by_config = client.get(
            "/v1/webhook_deliveries/", params={"webhook_config_id": str(active_config.id)}
        )
        assert len(by_config.json()) == 1

        by_status = client.get("/v1/webhook_deliveries/", params={"status": "pending"})
        assert len(by_status.json()) == 1
        assert by_status.json()[0]["webhook_config_id"] == str(unsigned_config.id)

    def test_list_invalid_status(self, client):
        response = client.get("/v1/webhook_deliveries/", params={"status": "bogus"})
        assert response.status_code == 422

    def test_list_limit(self, client, db_session, active_config):
        for age in range(5):
            make_delivery(db_session, active_config, age_seconds=age)
        response = client.get("/v1/webhook_deliveries/", params={"limit": 2})
        assert len(response.json()) == 2
        assert response.headers["X-Total-Count"] == "5"

    def test_get(self, client, db_session, active_config):
        delivery = make_delivery(db_session, active_config)
        response = client.get(f"/v1/webhook_deliveries/{delivery.id}")
        assert response.status_code == 200
        assert response.json()["attempts"] == 0

    def test_get_not_found(self, client):
        response = client.get(f"/v1/webhook_deliveries/{uuid4()}")
        assert response.status_code == 404


class TestEventsAPI:
    def test_publish(self, client, active_config, unsigned_config):
        response = client.post(
            "/v1/events/",
            json={"event_type": "user.joined_community", "payload": {"user_id": "u_1"}},
        )
        assert response.status_code == 202
        assert response.json() == {"event_type": "user.joined_community", "deliveries": 2}

    def test_publish_null_payload(self, client, active_config):
        response = client.post(
            "/v1/events/", json={"event_type": "user.joined_community", "payload": None}
        )
        assert response.status_code == 202

        deliveries = client.get("/v1/webhook_deliveries/").json()
        assert len(deliveries) == 1
        assert deliveries[0]["payload"] is None

    def test_publish_without_payload_sends_empty_object(self, client, active_config):
        client.post("/v1/events/", json={"event_type": "user.joined_community"})

        deliveries = client.get("/v1/webhook_deliveries/").json()
        assert deliveries[0]["payload"] == {}

    def test_publish_without_subscribers(self, client):
        response = client.post("/v1/events/", json={"event_type": "discussion.auto_closed"})
        assert response.status_code == 202
        assert response.json()["deliveries"] == 0

    def test_publish_unknown_event(self, client):
        response = client.post("/v1/events/", json={"event_type": "invoice.paid"})
        assert response.status_code == 422


class TestDispatcherAPI:
    def test_empty_queue(self, client):
        response = client.post("/v1/webhook_dispatcher/run")
        assert response.status_code == 200
        assert response.json() == {"processed": 0}

    def test_run_cycle(self, client, db_session, active_config, unsigned_config):
        make_delivery(db_session, active_config)
        make_delivery(db_session, unsigned_config)

        def stream(method, url, **kwargs):
            response = MagicMock()
            response.encoding = "utf-8"
            if url.endswith("/unsigned"):
                response.status_code = 500
                response.iter_bytes.return_value = [b"down"]
            else:
                response.status_code = 200
                response.iter_bytes.return_value = [b"OK"]
            streamed = MagicMock()
            streamed.__enter__ = MagicMock(return_value=response)
            streamed.__exit__ = MagicMock(return_value=False)
            return streamed

        with patch("thirdplace.services.webhook_dispatcher.httpx.Client") as mock_client_cls:
            mock_client = MagicMock()
            mock_client.__enter__ = MagicMock(return_value=mock_client)
            mock_client.__exit__ = MagicMock(return_value=False)
            mock_client.stream.side_effect = stream
            mock_client_cls.return_value = mock_client

            response = client.post("/v1/webhook_dispatcher/run")

        assert response.status_code == 200
        assert response.json() == {"processed": 1, "failed": 1, "total": 2}

    def test_queue_error(self, client):
        with patch(
            "thirdplace.routers.webhook_dispatcher.WebhookDeliveryRepository.select_pending_batch",
            side_effect=RuntimeError("database unavailable"),
        ):
            response = client.post("/v1/webhook_dispatcher/run")

        assert response.status_code == 500
        assert "database unavailable" in response.json()["error"]
