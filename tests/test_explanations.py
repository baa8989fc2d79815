"""
Tests for match explanations and the LLM providers behind them
"""
import pytest
import requests

from database.models import Employee, Project, Requirement, Skill
from staffing.explanations import build_match_explanation
from staffing.llm_integration import LLMError, LLMManager, OpenAIProvider


def make_pair(availability="available"):
    project = Project(
        title="Portal", description="d", company="c", category="Web",
        requirements=[Requirement("React", 7), Requirement("SQL", 5), Requirement("Go", 5)]
    )
    employee = Employee(
        first_name="Mia", last_name="Hart", email="mia@example.com",
        position="Dev", department="Eng", availability=availability,
        skills=[Skill("React", 8), Skill("SQL", 3), Skill("CSS", 6)], performance_score=84
    )
    return project, employee


def test_template_explanation():
    project, employee = make_pair()

    assert build_match_explanation(project, employee) == (
        "Mia Hart is a 67% match for this project. "
        "They have the required skills: React, SQL. "
        "They are currently available for new projects. "
        "With 3 total skills and a performance score of 84, "
        "they would be a valuable addition to this project."
    )


def test_template_skips_availability_when_busy():
    project, employee = make_pair(availability="busy")
    assert "currently available" not in build_match_explanation(project, employee)


def test_template_with_no_requirements():
    project, employee = make_pair()
    project.requirements = []
    assert build_match_explanation(project, employee).startswith("Mia Hart is a 0% match")


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload


def test_openai_provider_parses_completion(monkeypatch):
    captured = {}

    def fake_post(url, headers, json, timeout):
        captured.update(url=url, headers=headers, payload=json)
        return FakeResponse({"choices": [{"message": {"content": "Hello"}, "finish_reason": "stop"}]})

    monkeypatch.setattr(requests, "post", fake_post)
    provider = OpenAIProvider(api_key="sk-test", base_url="http://llm.local/v1/", model="m")

    result = provider.generate([{"role": "user", "content": "hi"}])

    assert result == {"content": "Hello", "finish_reason": "stop"}
    assert captured["url"] == "http://llm.local/v1/chat/completions"
    assert captured["headers"]["Authorization"] == "Bearer sk-test"
    assert captured["payload"]["model"] == "m"


def test_openai_provider_raises_on_http_error(monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse({}, status=503))

    with pytest.raises(LLMError):
        OpenAIProvider(api_key="").generate([])


def test_openai_provider_raises_on_malformed_body(monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse({"choices": []}))

    with pytest.raises(LLMError):
        OpenAIProvider(api_key="").generate([])


def test_manager_falls_back_on_empty_content(monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse(
        {"choices": [{"message": {"content": "   "}}]}
    ))
    manager = LLMManager(OpenAIProvider(api_key=""))

    assert manager.rephrase_explanation("template text", "Portal") == "template text"
