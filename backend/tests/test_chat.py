import pytest
import requests

from brewhaven.adapters import get_chat_adapter
from brewhaven.adapters.deepseek_chat import DeepSeekChatAdapter
from brewhaven.adapters.gemini_chat import GeminiChatAdapter
from brewhaven.api.routes_chat import get_chat_service
from brewhaven.main import app
from brewhaven.models.chat import ChatMessage
from brewhaven.services.chat_service import ChatService
from brewhaven.errors import ChatProviderError, ValidationError


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeHttp:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response


def _reply(text):
    return FakeResponse(200, {"candidates": [{"content": {"parts": [{"text": text}]}}]})


def _adapter(http, api_key="test-key"):
    return GeminiChatAdapter(api_key=api_key, model="gemini-pro", http=http)


def test_reply_and_request_shape():
    http = FakeHttp(_reply("Try a cortado."))
    history = [
        {"role": "user", "content": "Something strong?"},
        {"role": "assistant", "content": "Espresso!"},
    ]
    assert _adapter(http).generate("And milder?", history) == "Try a cortado."

    url, kwargs = http.calls[0]
    assert url.endswith("/models/gemini-pro:generateContent")
    assert kwargs["params"] == {"key": "test-key"}
    roles = [c["role"] for c in kwargs["json"]["contents"]]
    assert roles == ["user", "user", "model", "user"]
    assert kwargs["json"]["contents"][-1]["parts"][0]["text"] == "And milder?"


@pytest.mark.parametrize(
    "response,status,message",
    [
        (FakeResponse(429, text="quota"), 429, "Rate limit exceeded. Please try again later."),
        (FakeResponse(400, {"error": {"message": "API key not valid"}}), 400, "API key not valid"),
        (FakeResponse(400, text="<html>"), 400, "Invalid request. Please check your API key."),
        (FakeResponse(503, text="down"), 502, None),
        (FakeResponse(200, {"candidates": []}), 502, "No response from AI. Please try again."),
    ],
)
def test_provider_error_mapping(response, status, message):
    with pytest.raises(ChatProviderError) as exc:
        _adapter(FakeHttp(response)).generate("hi")
    assert exc.value.status_code == status
    if message:
        assert exc.value.message == message


def test_network_failure_and_missing_key():
    with pytest.raises(ChatProviderError) as exc:
        _adapter(FakeHttp(error=requests.ConnectionError("boom"))).generate("hi")
    assert exc.value.status_code == 502

    http = FakeHttp(_reply("unused"))
    with pytest.raises(ChatProviderError) as exc:
        _adapter(http, api_key="").generate("hi")
    assert exc.value.status_code == 500
    assert http.calls == []


def _deepseek_reply(text):
    return FakeResponse(200, {"choices": [{"message": {"role": "assistant", "content": text}}]})


def test_deepseek_reply_and_request_shape():
    http = FakeHttp(_deepseek_reply("A cappuccino."))
    adapter = DeepSeekChatAdapter(api_key="ds-key", http=http)
    history = [{"role": "user", "content": "Foamy?"}, {"role": "assistant", "content": "Yes."}]
    assert adapter.generate("Which one?", history) == "A cappuccino."

    url, kwargs = http.calls[0]
    assert url == "https://api.deepseek.com/chat/completions"
    assert kwargs["headers"] == {"Authorization": "Bearer ds-key"}
    assert kwargs["json"]["model"] == "deepseek-chat"
    roles = [m["role"] for m in kwargs["json"]["messages"]]
    assert roles == ["system", "user", "assistant", "user"]


@pytest.mark.parametrize(
    "response,status",
    [
        (FakeResponse(429, text="busy"), 429),
        (FakeResponse(401, text="bad key"), 400),
        (FakeResponse(500, text="oops"), 502),
        (FakeResponse(200, {"choices": []}), 502),
    ],
)
def test_deepseek_error_mapping(response, status):
    with pytest.raises(ChatProviderError) as exc:
        DeepSeekChatAdapter(api_key="ds-key", http=FakeHttp(response)).generate("hi")
    assert exc.value.status_code == status


def test_provider_selection():
    assert isinstance(get_chat_adapter(), GeminiChatAdapter)
    assert isinstance(get_chat_adapter("deepseek"), DeepSeekChatAdapter)
    with pytest.raises(ValueError):
        get_chat_adapter("llama")


def test_exchange_is_persisted_for_signed_in_user(db, shopper):
    svc = ChatService(db, adapter=_adapter(FakeHttp(_reply("A flat white."))))
    assert svc.send(shopper, "  Recommend something  ") == "A flat white."
    assert [(m.role, m.content) for m in svc.history(shopper)] == [
        ("user", "Recommend something"),
        ("assistant", "A flat white."),
    ]


def test_anonymous_chat_is_not_persisted(db):
    svc = ChatService(db, adapter=_adapter(FakeHttp(_reply("Mocha."))))
    assert svc.send(None, "Sweet drink?") == "Mocha."
    assert db.query(ChatMessage).count() == 0


def test_empty_message_rejected(db):
    http = FakeHttp(_reply("unused"))
    with pytest.raises(ValidationError):
        ChatService(db, adapter=_adapter(http)).send(None, "   ")
    assert http.calls == []


def test_chat_api(client, db, shopper):
    http = FakeHttp(_reply("Cold brew it is."))
    app.dependency_overrides[get_chat_service] = lambda: ChatService(db, adapter=_adapter(http))
    headers = {"X-User-Id": str(shopper.user_id)}

    r = client.post(
        "/api/chat",
        json={"message": "Hot day", "conversation_history": [{"role": "user", "content": "hello"}]},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json() == {"response": "Cold brew it is."}

    r = client.get("/api/chat/history", headers=headers)
    assert [m["role"] for m in r.json()] == ["user", "assistant"]

    assert client.post("/api/chat", json={"message": ""}).status_code == 400


def test_chat_api_rate_limit(client, db):
    http = FakeHttp(FakeResponse(429, text="slow down"))
    app.dependency_overrides[get_chat_service] = lambda: ChatService(db, adapter=_adapter(http))
    r = client.post("/api/chat", json={"message": "hi"})
    assert r.status_code == 429
    assert r.json()["detail"] == "Rate limit exceeded. Please try again later."
