"""Integration tests for GET /health."""

from fastapi.testclient import TestClient


class TestHealthEndpoint:
    def test_nothing_loaded_at_startup(self, build_app, secret_source):
        with TestClient(build_app()) as client:
            resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {
            "status": "ok",
            "checks": {
                "captcha_credentials": "not_loaded",
                "mail_transport": "not_loaded",
            },
        }
        assert secret_source.requested == []

    def test_cached_after_first_message(self, build_app, submission_payload):
        with TestClient(build_app()) as client:
            client.post("/contact", json=submission_payload, follow_redirects=False)
            resp = client.get("/health")
        assert resp.json()["checks"] == {
            "captcha_credentials": "cached",
            "mail_transport": "cached",
        }

    def test_failed_fetch_stays_not_loaded(
        self, build_app, submission_payload, secret_source
    ):
        secret_source.remove_secret("friendlycaptcha-data")
        with TestClient(build_app()) as client:
            client.post("/contact", json=submission_payload, follow_redirects=False)
            resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["checks"]["captcha_credentials"] == "not_loaded"
        assert resp.json()["checks"]["mail_transport"] == "cached"
