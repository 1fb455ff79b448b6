"""HTTP-level tests for the render endpoint."""

from fastapi.testclient import TestClient
from playwright.async_api import Error as PlaywrightError

from webprint.app import build_app
from webprint.config import Settings

from .fakes import FakeBehavior, FakeEngine

RENDER_PATH = "/api/generate-pdf"


class TestGeneratePdf:

    def test_html_renders_pdf(self, client: TestClient, engine: FakeEngine) -> None:
        resp = client.post(RENDER_PATH, json={"html": "<html><body><h1>Test</h1></body></html>"})

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.content[:5] == b"%PDF-"
        assert int(resp.headers["content-length"]) == len(resp.content)
        assert engine.last_browser.close_count == 1

    def test_url_with_cookies_renders_pdf(self, client: TestClient, engine: FakeEngine) -> None:
        resp = client.post(RENDER_PATH, json={
            "url": "https://example.com/book",
            "cookies": [{"name": "sid", "value": "abc"}],
            "options": {"scale": 1},
        })

        assert resp.status_code == 200
        assert engine.last_browser.contexts[0].cookies[0]["name"] == "sid"
        assert engine.last_browser.page.pdf_kwargs["scale"] == 1

    def test_missing_content_is_400_without_browser(self, client: TestClient, engine: FakeEngine) -> None:
        resp = client.post(RENDER_PATH, json={"cookies": []})

        assert resp.status_code == 400
        body = resp.json()
        assert body["error"]["code"] == "invalid_input"
        assert engine.launch_count == 0

    def test_html_at_ceiling_accepted_and_over_rejected(
        self, client: TestClient, engine: FakeEngine, settings: Settings
    ) -> None:
        limit = settings.max_html_bytes
        at_limit = "<p>" + "x" * (limit - 7) + "</p>"
        assert len(at_limit.encode()) == limit

        ok = client.post(RENDER_PATH, json={"html": at_limit})
        assert ok.status_code == 200

        too_big = client.post(RENDER_PATH, json={"html": at_limit + "x"})
        assert too_big.status_code == 400
        assert too_big.json()["error"]["code"] == "payload_too_large"
        assert engine.launch_count == 1

    def test_url_with_oversized_html_is_rejected(
        self, client: TestClient, engine: FakeEngine, settings: Settings
    ) -> None:
        resp = client.post(RENDER_PATH, json={
            "url": "https://example.com/book",
            "html": "x" * (settings.max_html_bytes + 1),
        })

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "payload_too_large"
        assert engine.launch_count == 0

    def test_oversized_body_rejected_before_parsing(
        self, client: TestClient, engine: FakeEngine, settings: Settings
    ) -> None:
        padding = "y" * settings.max_body_bytes
        resp = client.post(RENDER_PATH, json={"url": "https://example.com/book", "padding": padding})

        assert resp.status_code == 400
        body = resp.json()
        assert body["error"]["code"] == "payload_too_large"
        assert body["error"]["details"]["max_bytes"] == settings.max_body_bytes
        assert engine.launch_count == 0

    def test_unresolvable_url_is_render_timeout(self, settings: Settings) -> None:
        engine = FakeEngine(FakeBehavior(goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED")))
        with TestClient(build_app(settings, engine=engine)) as client:
            resp = client.post(RENDER_PATH, json={"url": "https://example.invalid", "cookies": []})

        assert resp.status_code == 500
        assert resp.json()["error"]["code"] == "render_timeout"
        assert engine.last_browser.close_count == 1

    def test_oversized_pdf_is_500(self, settings: Settings) -> None:
        engine = FakeEngine(FakeBehavior(pdf_bytes=b"%PDF-" + b"0" * settings.max_pdf_bytes))
        with TestClient(build_app(settings, engine=engine)) as client:
            resp = client.post(RENDER_PATH, json={"html": "<p>big</p>"})

        assert resp.status_code == 500
        assert resp.json()["error"]["code"] == "result_too_large"
        assert resp.headers["content-type"].startswith("application/json")

    def test_engine_unavailable_is_503(self, settings: Settings) -> None:
        engine = FakeEngine(available=False)
        with TestClient(build_app(settings, engine=engine)) as client:
            resp = client.post(RENDER_PATH, json={"html": "<p>x</p>"})
            health = client.get("/health")

        assert resp.status_code == 503
        assert resp.json()["error"]["code"] == "service_unavailable"
        assert health.status_code == 200
        assert health.json()["engine_available"] is False

    def test_invalid_options_are_400(self, client: TestClient, engine: FakeEngine) -> None:
        resp = client.post(RENDER_PATH, json={"html": "<p>x</p>", "pdfOptions": {"scale": 10}})

        assert resp.status_code == 400
        assert engine.launch_count == 0

    def test_malformed_body_is_400(self, client: TestClient) -> None:
        resp = client.post(
            RENDER_PATH, content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "invalid_input"

    def test_non_object_options_are_400(self, client: TestClient, engine: FakeEngine) -> None:
        resp = client.post(RENDER_PATH, json={"html": "<p>x</p>", "options": ["scale", 2]})

        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "invalid_input"
        assert engine.launch_count == 0

    def test_repeat_renders_are_independent(self, client: TestClient, engine: FakeEngine) -> None:
        body = {"html": "<html><body><h1>Test</h1></body></html>"}
        first = client.post(RENDER_PATH, json=body)
        second = client.post(RENDER_PATH, json=body)

        assert abs(len(first.content) - len(second.content)) < 64
        assert engine.launch_count == 2
        assert all(b.close_count == 1 for b in engine.browsers)

    def test_request_id_echoed(self, client: TestClient) -> None:
        resp = client.post(RENDER_PATH, json={}, headers={"X-Request-ID": "req_test"})
        assert resp.headers["X-Request-ID"] == "req_test"
        assert resp.json()["request_id"] == "req_test"


class TestRoutesAndOrigins:

    def test_root_render_disabled_by_default(self, client: TestClient) -> None:
        resp = client.post("/", json={"html": "<p>x</p>"})
        assert resp.status_code == 405

    def test_root_render_when_enabled(self, engine: FakeEngine) -> None:
        settings = Settings(enable_root_render=True, settle_delay_ms=0)
        with TestClient(build_app(settings, engine=engine)) as client:
            resp = client.post("/", json={"html": "<p>x</p>"})
        assert resp.status_code == 200
        assert resp.content.startswith(b"%PDF-")

    def test_disallowed_origin_is_rejected(self, client: TestClient, engine: FakeEngine) -> None:
        resp = client.post(
            RENDER_PATH,
            json={"html": "<p>x</p>"},
            headers={"Origin": "https://evil.example"},
        )
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "origin_not_allowed"
        assert engine.launch_count == 0

    def test_allowed_origin_gets_cors_headers(self, client: TestClient) -> None:
        resp = client.post(
            RENDER_PATH,
            json={"html": "<p>x</p>"},
            headers={"Origin": "https://app.example.com"},
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "https://app.example.com"

    def test_origin_match_is_case_sensitive(self, client: TestClient, engine: FakeEngine) -> None:
        resp = client.post(
            RENDER_PATH,
            json={"html": "<p>x</p>"},
            headers={"Origin": "https://APP.example.com"},
        )
        assert resp.status_code == 403
        assert "access-control-allow-origin" not in resp.headers
        assert engine.launch_count == 0

    def test_trailing_slash_in_allowlist_still_matches(self, engine: FakeEngine) -> None:
        settings = Settings(cors_origins=["https://app.example.com/"], settle_delay_ms=0)
        with TestClient(build_app(settings, engine=engine)) as client:
            resp = client.post(
                RENDER_PATH,
                json={"html": "<p>x</p>"},
                headers={"Origin": "https://app.example.com"},
            )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "https://app.example.com"
