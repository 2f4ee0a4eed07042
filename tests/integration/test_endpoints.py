"""HTTP tests for the /image, /text and /health endpoints."""

import pytest
from fastapi.testclient import TestClient

from chat_studio.main import create_app
from chat_studio.utils import g_config
from tests.conftest import IMAGE_MODEL, TEXT_MODEL
from tests.helpers.provider_mocks import image_response, text_response


class TestImageEndpoint:
    def test_success(self, client, fake_client):
        fake_client.respond_with(image_response(data="QUJD", mime_type="image/jpeg", text="hello"))

        resp = client.post("/image", json={"prompt": "a lighthouse"})

        assert resp.status_code == 200
        assert resp.json() == {"images": [{"data": "QUJD", "mimeType": "image/jpeg"}], "text": "hello"}

    @pytest.mark.parametrize("body", [{"prompt": ""}, {}, {"images": [{"data": "QUJD"}]}])
    def test_prompt_required(self, client, fake_client, body):
        resp = client.post("/image", json=body)

        assert resp.status_code == 400
        assert resp.json() == {"error": "Prompt is required"}
        assert fake_client.calls == []

    def test_request_shape_forwarded(self, client, fake_client):
        fake_client.respond_with(image_response())

        resp = client.post(
            "/image",
            json={
                "prompt": "make the sky purple",
                "images": [{"data": "aGVsbG8=", "mimeType": "image/jpeg"}, {"data": "aGk="}],
                "aspectRatio": "16:9",
                "responseType": "BOTH",
                "history": [
                    {"role": "user", "parts": [{"text": "a lighthouse"}]},
                    {"role": "model", "parts": [{"inlineData": {"data": "QUJD", "mimeType": "image/png"}}]},
                ],
            },
        )

        assert resp.status_code == 200
        call = fake_client.calls[0]
        assert call["model"] == IMAGE_MODEL
        contents = call["contents"]
        assert [c.role for c in contents] == ["user", "model", "user"]
        new_turn = contents[-1]
        assert new_turn.parts[0].text == "make the sky purple"
        assert [p.inline_data.mime_type for p in new_turn.parts[1:]] == ["image/jpeg", "image/png"]
        assert new_turn.parts[1].inline_data.data == b"hello"
        config = call["config"]
        assert [str(getattr(m, "value", m)) for m in config.response_modalities] == ["IMAGE", "TEXT"]
        assert config.image_config.aspect_ratio == "16:9"

    def test_blocked(self, client, fake_client):
        fake_client.respond_with({"promptFeedback": {"blockReason": "SAFETY"}})

        resp = client.post("/image", json={"prompt": "something"})

        assert resp.status_code == 500
        assert resp.json() == {"error": "Request blocked: SAFETY"}

    def test_no_output_with_finish_reason(self, client, fake_client):
        fake_client.respond_with({"candidates": [{"finishReason": "MAX_TOKENS"}]})

        resp = client.post("/image", json={"prompt": "something"})

        assert resp.status_code == 500
        assert resp.json() == {"error": "No output returned (finish reason: MAX_TOKENS)"}

    def test_provider_error(self, client, fake_client):
        fake_client.fail_with(RuntimeError("quota exceeded"))

        resp = client.post("/image", json={"prompt": "something"})

        assert resp.status_code == 500
        assert resp.json() == {"error": "quota exceeded"}

    def test_invalid_response_type(self, client):
        resp = client.post("/image", json={"prompt": "x", "responseType": "VIDEO"})

        assert resp.status_code == 400
        assert "error" in resp.json()


class TestTextEndpoint:
    def test_success(self, client, fake_client):
        fake_client.respond_with(text_response("Hello!", "How can I help?"))

        resp = client.post("/text", json={"prompt": "hi"})

        assert resp.status_code == 200
        assert resp.json() == {"text": "Hello!\nHow can I help?"}
        assert fake_client.calls[0]["model"] == TEXT_MODEL

    @pytest.mark.parametrize("body", [{}, {"prompt": ""}, {"files": []}])
    def test_prompt_or_files_required(self, client, body):
        resp = client.post("/text", json=body)

        assert resp.status_code == 400
        assert resp.json() == {"error": "Provide a prompt or files"}

    def test_files_only(self, client, fake_client):
        fake_client.respond_with(text_response("It is a cat."))

        resp = client.post(
            "/text",
            json={
                "files": [{"data": "aGVsbG8="}],
                "history": [{"role": "user", "parts": [{"text": "describe the image"}]}],
            },
        )

        assert resp.status_code == 200
        contents = fake_client.calls[0]["contents"]
        assert len(contents) == 1
        assert contents[0].parts[0].text == "describe the image"
        assert contents[0].parts[1].inline_data.mime_type == "image/png"

    def test_empty_output_is_not_an_error(self, client, fake_client):
        fake_client.respond_with({"promptFeedback": {"blockReason": "SAFETY"}})

        resp = client.post("/text", json={"prompt": "hi"})

        assert resp.status_code == 200
        assert resp.json() == {"text": ""}

    def test_provider_error(self, client, fake_client):
        fake_client.fail_with(RuntimeError("API key not valid"))

        resp = client.post("/text", json={"prompt": "hi"})

        assert resp.status_code == 500
        assert resp.json() == {"error": "API key not valid"}

    def test_malformed_history(self, client, fake_client):
        resp = client.post("/text", json={"prompt": "hi", "history": [{"role": "system"}]})

        assert resp.status_code == 400
        assert "error" in resp.json()
        assert fake_client.calls == []


class TestServer:
    def test_health(self, client):
        resp = client.get("/health")

        assert resp.status_code == 200
        assert resp.json() == {
            "ok": True,
            "text_model": TEXT_MODEL,
            "image_model": IMAGE_MODEL,
            "error": None,
        }

    def test_unconfigured_gateway(self, monkeypatch):
        monkeypatch.setattr(g_config.gemini, "api_key", None)

        with TestClient(create_app()) as client:
            resp = client.post("/text", json={"prompt": "hi"})

        assert resp.status_code == 503
        assert resp.json() == {"error": "Gemini client is not configured"}

    def test_api_key_required_when_configured(self, client, fake_client, monkeypatch):
        monkeypatch.setattr(g_config.server, "api_key", "secret")
        fake_client.respond_with(text_response("ok"))

        missing = client.post("/text", json={"prompt": "hi"})
        wrong = client.post(
            "/text", json={"prompt": "hi"}, headers={"Authorization": "Bearer nope"}
        )
        good = client.post(
            "/text", json={"prompt": "hi"}, headers={"Authorization": "Bearer secret"}
        )

        assert missing.status_code == 401
        assert missing.json() == {"error": "Invalid or missing token"}
        assert wrong.status_code == 403
        assert good.status_code == 200
        assert good.json() == {"text": "ok"}
