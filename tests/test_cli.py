import pytest

from phyassist import cli
from phyassist.errors import FeedbackError
from phyassist.submission import CONFIG_MISSING

from conftest import FakeClient


@pytest.fixture
def solution(tmp_path, jpeg):
    path = tmp_path / "solution.jpg"
    path.write_bytes(jpeg)
    return path


@pytest.fixture
def fake(monkeypatch):
    client = FakeClient()
    monkeypatch.setenv("PHYASSIST_API_URL", "https://api.example")
    monkeypatch.setattr(cli, "FeedbackClient", lambda url, timeout: client)
    return client


def test_ask_prints_feedback(fake, solution, capsys):
    assert cli.main(["ask", "Find the acceleration", str(solution)]) == 0
    assert capsys.readouterr().out.strip() == "Good start! $a = F/m$"
    assert fake.calls[0][0] == "Find the acceleration"
    assert fake.calls[0][2] == "image/jpeg"


def test_ask_writes_rendered_html(fake, solution, tmp_path):
    out = tmp_path / "feedback.html"
    assert cli.main(["ask", "Find the acceleration", str(solution), "--html", str(out)]) == 0
    html = out.read_text(encoding="utf-8")
    assert "Good start! <math" in html


def test_ask_reports_failure(fake, solution, capsys):
    fake.error = FeedbackError("An internal error occurred while analyzing the solution.")
    assert cli.main(["ask", "Find v", str(solution)]) == 1
    assert "An internal error occurred while analyzing the solution." in capsys.readouterr().err


def test_ask_without_api_url(monkeypatch, solution, capsys):
    monkeypatch.delenv("PHYASSIST_API_URL", raising=False)
    assert cli.main(["ask", "Find v", str(solution)]) == 1
    assert CONFIG_MISSING in capsys.readouterr().err


def test_ask_missing_file(fake, tmp_path, capsys):
    assert cli.main(["ask", "Find v", str(tmp_path / "nope.jpg")]) == 1
    assert "could not read" in capsys.readouterr().err
    assert fake.calls == []


def test_command_is_required():
    with pytest.raises(SystemExit):
        cli.main([])
