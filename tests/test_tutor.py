from types import SimpleNamespace

import pytest

from phyassist.tutor import FeedbackModel, build_prompt, to_data_url


class StubCompletions:
    def __init__(self, content="Well done. $F = ma$", error=None):
        self.content = content
        self.error = error
        self.kwargs = []

    def create(self, **kwargs):
        self.kwargs.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def stub_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_prompt_embeds_question_and_directives():
    prompt = build_prompt("A ball of mass {m} is dropped")
    assert '"A ball of mass {m} is dropped"' in prompt
    assert "correct steps" in prompt
    assert "first conceptual error" in prompt
    assert "Physics principles" in prompt
    assert "scaffolded hint" in prompt
    assert "DO NOT give the final answer" in prompt
    assert "Use $...$ for inline math and $$...$$ for display math" in prompt


def test_prompt_is_deterministic():
    assert build_prompt("Find v") == build_prompt("Find v")


def test_data_url():
    assert to_data_url("aGk=", "image/png") == "data:image/png;base64,aGk="


def test_generate_sends_prompt_and_image_in_one_message():
    completions = StubCompletions()
    model = FeedbackModel(api_key="k", model="gpt-4o-mini", client=stub_client(completions))
    assert model.generate("Find v", "aGk=", "image/jpeg") == "Well done. $F = ma$"

    (kwargs,) = completions.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert "stream" not in kwargs
    (message,) = kwargs["messages"]
    text, image = message["content"]
    assert text == {"type": "text", "text": build_prompt("Find v")}
    assert image == {"type": "image_url", "image_url": {"url": "data:image/jpeg;base64,aGk="}}


def test_generate_propagates_errors():
    completions = StubCompletions(error=RuntimeError("rate limited"))
    model = FeedbackModel(api_key="k", model="m", client=stub_client(completions))
    with pytest.raises(RuntimeError):
        model.generate("Find v", "aGk=", "image/jpeg")
    assert len(completions.kwargs) == 1


def test_real_client_has_timeout_and_no_retries():
    model = FeedbackModel(api_key="sk-test", model="m", timeout=7.5)
    assert model._client.max_retries == 0
    assert model._client.timeout == 7.5
