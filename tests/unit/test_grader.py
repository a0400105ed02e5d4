import json

import httpx
import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from config import LlmRoute
from interview.errors import ConfigurationError, GradingFormatError, GradingTransportError
from interview.grader import GradingClient, build_messages
from interview.models import Answer, Question, Session
from interview.prompts import GRADER_SYSTEM_PROMPT
from llm_gateway import strip_code_fences


VERDICT = {
    "scores": {"migration_intent": 5, "goal_understanding": 4, "answer_length": 4, "total_score": 13},
    "classification": "Good",
    "feedback": {
        "overall": "Solid answer.",
        "by_criterion": {"migration_intent": "a", "goal_understanding": "b", "answer_length": "c"},
        "improvements": ["Mention your return plans."],
    },
}


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text or json.dumps(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeClient:
    def __init__(self, responses) -> None:
        self.responses = list(responses)
        self.requests = []

    def post(self, url, *, json, headers, timeout):
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _completion(content: str) -> FakeResponse:
    return FakeResponse(payload={"choices": [{"message": {"role": "assistant", "content": content}}]})


def _route(**overrides) -> LlmRoute:
    values = {
        "name": "grading",
        "base_url": "https://llm.test/v1/chat/completions",
        "model": "gpt-3.5-turbo",
        "timeout_s": 5,
        "api_key": "sk-test",
        "max_tokens": 1000,
        "temperature": 0.3,
    }
    values.update(overrides)
    return LlmRoute(**values)


def _question() -> Question:
    return Question(id="q1_Purpose_of_Study", category="Purpose of Study", text="Why the US?")


def test_fenced_reply_is_parsed():
    client = FakeClient([_completion("```json\n" + json.dumps(VERDICT) + "\n```")])
    grader = GradingClient(_route(), client=client)
    analysis = grader.analyze(Session(id="s1"), _question(), "To study AI.")
    assert analysis.scores.total_score == 13
    assert analysis.classification == "Good"

    request = client.requests[0]
    assert request["url"] == "https://llm.test/v1/chat/completions"
    assert request["headers"]["Authorization"] == "Bearer sk-test"
    assert request["json"]["model"] == "gpt-3.5-turbo"
    assert request["json"]["max_tokens"] == 1000
    assert request["json"]["temperature"] == 0.3
    assert request["json"]["messages"][0] == {"role": "system", "content": GRADER_SYSTEM_PROMPT}
    assert request["json"]["messages"][-1]["role"] == "user"
    assert "Student's Answer: To study AI." in request["json"]["messages"][-1]["content"]


def test_history_is_replayed_before_new_answer(analysis_factory):
    previous = Answer(question_id="q0_major", question_text="What is your major?", text="CS", analysis=analysis_factory())
    skipped = Answer(question_id="q0_college", question_text="Which college?", text="MIT")
    session = Session(id="s1", answers=[skipped, previous])
    messages = build_messages(session, "Why the US?", "Research.")
    assert [type(message) for message in messages] == [
        SystemMessage,
        HumanMessage,
        HumanMessage,
        AIMessage,
        HumanMessage,
    ]
    assert json.loads(messages[3].content)["scores"]["total_score"] == 13


def test_non_success_status_maps_to_transport_error():
    client = FakeClient([FakeResponse(status_code=500, payload={"error": "boom"})])
    grader = GradingClient(_route(), client=client)
    with pytest.raises(GradingTransportError) as info:
        grader.analyze(Session(id="s1"), _question(), "Answer")
    assert info.value.status == 500
    assert "boom" in info.value.body


def test_timeout_maps_to_transport_error():
    client = FakeClient([httpx.ConnectTimeout("timed out")])
    grader = GradingClient(_route(), client=client)
    with pytest.raises(GradingTransportError) as info:
        grader.analyze(Session(id="s1"), _question(), "Answer")
    assert info.value.status is None


def test_invalid_verdict_maps_to_format_error():
    client = FakeClient([_completion("I think this answer is fine.")])
    grader = GradingClient(_route(), client=client)
    with pytest.raises(GradingFormatError) as info:
        grader.analyze(Session(id="s1"), _question(), "Answer")
    assert info.value.content == "I think this answer is fine."
    assert len(client.requests) == 1


def test_one_retry_on_format_error_when_enabled():
    client = FakeClient([_completion("not json"), _completion(json.dumps(VERDICT))])
    grader = GradingClient(_route(max_retries=1), client=client)
    analysis = grader.analyze(Session(id="s1"), _question(), "Answer")
    assert analysis.scores.total_score == 13
    assert len(client.requests) == 2
    assert client.requests[1]["json"]["messages"][-1]["role"] == "system"


def test_missing_credential_fails_before_network():
    client = FakeClient([])
    grader = GradingClient(_route(api_key=None), client=client)
    assert not grader.has_credential()
    with pytest.raises(ConfigurationError):
        grader.analyze(Session(id="s1"), _question(), "Answer")
    assert client.requests == []


def test_strip_code_fences():
    assert strip_code_fences("```json\n{}\n```") == "{}"
    assert strip_code_fences("```\n{}\n```") == "{}"
    assert strip_code_fences("  {}  ") == "{}"


def test_reply_without_choices_is_a_format_error():
    client = FakeClient([FakeResponse(payload={"choices": []})])
    grader = GradingClient(_route(), client=client)
    with pytest.raises(GradingFormatError):
        grader.analyze(Session(id="s1"), _question(), "Answer")
