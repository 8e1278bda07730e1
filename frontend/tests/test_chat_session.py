from decimal import Decimal

import pytest

from chat_session import ChatSession, SessionState
from relay_client import RelayError
from schema import ChatRequest, ChatResponse


def _reply(content: str, prompt_tokens: int = 1000, completion_tokens: int = 500):
    return ChatResponse.model_validate(
        {
            "choices": [{"message": {"role": "assistant", "content": content}}],
            "usage": {
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
            },
        }
    )


class FakeRelay:
    def __init__(self, replies=None, error: RelayError | None = None):
        self.replies = list(replies or [])
        self.error = error
        self.requests: list[ChatRequest] = []
        self.session: ChatSession | None = None
        self.state_during_send: list[SessionState] = []

    def __call__(self, request: ChatRequest) -> ChatResponse:
        self.requests.append(request)
        if self.session is not None:
            self.state_during_send.append(self.session.state)
        if self.error is not None:
            raise self.error
        return self.replies.pop(0)


def _session(relay: FakeRelay, model: str = "gpt-4o-mini") -> ChatSession:
    session = ChatSession(relay, model=model)
    relay.session = session
    return session


def test_successful_turn_appends_reply_and_cost():
    relay = FakeRelay([_reply("# Hi\n- one")])
    session = _session(relay)

    assert session.submit("hello") is True

    assert [(m.role, m.content) for m in session.messages] == [
        ("user", "hello"),
        ("assistant", "# Hi\n- one"),
    ]
    assert session.current_cost == Decimal("0.00045")
    assert session.total_cost == Decimal("0.00045")
    assert session.state is SessionState.IDLE
    assert session.error is None
    assert relay.state_during_send == [SessionState.SENDING]


def test_full_transcript_is_sent_every_turn():
    relay = FakeRelay([_reply("a1"), _reply("a2")])
    session = _session(relay)

    session.submit("q1")
    session.submit("q2")

    sent = [(m.role, m.content) for m in relay.requests[1].messages]
    assert sent == [("user", "q1"), ("assistant", "a1"), ("user", "q2")]
    assert relay.requests[1].model == "gpt-4o-mini"


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_blank_input_is_ignored(text):
    relay = FakeRelay()
    session = _session(relay)

    assert session.submit(text) is False
    assert session.messages == ()
    assert relay.requests == []


def test_submit_while_sending_is_ignored():
    relay = FakeRelay([_reply("a")])
    session = _session(relay)
    session.state = SessionState.SENDING

    assert session.submit("hello") is False
    assert relay.requests == []


def test_failed_turn_keeps_user_message_without_reply():
    relay = FakeRelay(error=RelayError("Failed to fetch response from upstream provider"))
    session = _session(relay)

    assert session.submit("hello") is True

    assert [(m.role, m.content) for m in session.messages] == [("user", "hello")]
    assert session.error == "Failed to fetch response from upstream provider"
    assert session.state is SessionState.IDLE
    assert session.total_cost == 0


def test_error_is_cleared_by_next_submission():
    relay = FakeRelay(error=RelayError("boom"))
    session = _session(relay)
    session.submit("first")

    relay.error = None
    relay.replies = [_reply("ok")]
    session.submit("second")

    assert session.error is None
    assert [m.role for m in session.messages] == ["user", "user", "assistant"]


def test_total_cost_accumulates_per_turn():
    relay = FakeRelay(
        [
            _reply("a1", prompt_tokens=1000, completion_tokens=500),
            _reply("a2", prompt_tokens=2000, completion_tokens=1000),
        ]
    )
    session = _session(relay)

    session.submit("q1")
    first = session.current_cost
    session.submit("q2")
    second = session.current_cost

    assert first == Decimal("0.00045")
    assert second == Decimal("0.0009")
    assert session.total_cost == first + second


def test_unknown_model_adds_zero_cost():
    relay = FakeRelay([_reply("a")])
    session = _session(relay, model="o1-preview")

    session.submit("q")

    assert session.current_cost == 0
    assert session.total_cost == 0
    assert [m.role for m in session.messages] == ["user", "assistant"]


def test_model_change_applies_to_next_submission_only():
    relay = FakeRelay([_reply("a1"), _reply("a2")])
    session = _session(relay)

    session.submit("q1")
    assert session.select_model("gpt-4") is True
    session.submit("q2")

    assert [r.model for r in relay.requests] == ["gpt-4o-mini", "gpt-4"]
    assert session.messages[1].content == "a1"


def test_model_change_is_disabled_while_sending():
    session = _session(FakeRelay())
    session.state = SessionState.SENDING

    assert session.select_model("gpt-4") is False
    assert session.model == "gpt-4o-mini"


def test_empty_reply_is_a_failed_turn_and_next_turn_still_works(monkeypatch):
    import relay_client
    from relay_client import RelayClient

    bodies = [
        {
            "choices": [{"message": {"role": "assistant", "content": ""}, "finish_reason": "length"}],
            "usage": {"prompt_tokens": 10, "completion_tokens": 100},
        },
        {
            "choices": [{"message": {"role": "assistant", "content": "answer"}}],
            "usage": {"prompt_tokens": 10, "completion_tokens": 5},
        },
    ]
    sent = []

    class Response:
        status_code = 200
        text = ""

        def __init__(self, body):
            self._body = body

        def json(self):
            return self._body

        def raise_for_status(self):
            pass

    def fake_post(url, **kwargs):
        sent.append(kwargs["json"])
        return Response(bodies.pop(0))

    monkeypatch.setattr(relay_client.requests, "post", fake_post)
    session = ChatSession(RelayClient("http://relay.test").chat, model="o1-preview")

    session.submit("q1")
    assert [(m.role, m.content) for m in session.messages] == [("user", "q1")]
    assert session.error is not None
    assert session.state is SessionState.IDLE

    session.submit("q2")
    # 送信した履歴に空の本文が含まれない
    assert all(m["content"] for m in sent[1]["messages"])
    assert [(m.role, m.content) for m in session.messages] == [
        ("user", "q1"),
        ("user", "q2"),
        ("assistant", "answer"),
    ]
    assert session.error is None
