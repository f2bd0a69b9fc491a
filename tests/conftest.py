import io
from urllib.parse import urlsplit

import pytest
from PIL import Image

from phyassist import api
from phyassist.config import ServiceConfig

TRUSTED_ORIGIN = "https://phyassist.netlify.app"


def image_bytes(fmt: str = "JPEG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), (200, 30, 30)).save(buf, format=fmt)
    return buf.getvalue()


class FakeModel:
    def __init__(self, reply="Good start! $a = F/m$", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate(self, question, image_b64, mime_type):
        self.calls.append((question, image_b64, mime_type))
        if self.error is not None:
            raise self.error
        return self.reply


class FakeClient:
    def __init__(self, reply="Good start! $a = F/m$", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def request_feedback(self, question, image_b64, mime_type):
        self.calls.append((question, image_b64, mime_type))
        if self.error is not None:
            raise self.error
        return self.reply


class FakeResponse:
    def __init__(self, status_code, data):
        self.status_code = status_code
        self._data = data

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._data is None:
            raise ValueError("no JSON body")
        return self._data


class FlaskSession:
    """requests.Session stand-in that routes POSTs into a Flask test client."""

    def __init__(self, test_client, origin=None):
        self.test_client = test_client
        self.origin = origin
        self.posts = []

    def post(self, url, json=None, timeout=None):
        self.posts.append({"url": url, "json": json, "timeout": timeout})
        headers = {"Origin": self.origin} if self.origin else {}
        r = self.test_client.post(urlsplit(url).path, json=json, headers=headers)
        return FakeResponse(r.status_code, r.get_json(silent=True))


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    monkeypatch.setattr("phyassist.config.load_dotenv", lambda *a, **kw: False)


@pytest.fixture
def jpeg():
    return image_bytes("JPEG")


@pytest.fixture
def png():
    return image_bytes("PNG")


@pytest.fixture
def model():
    return FakeModel()


@pytest.fixture
def api_app(model):
    app = api.create_app(ServiceConfig(model=model, allowed_origin=TRUSTED_ORIGIN))
    app.config["TESTING"] = True
    return app


@pytest.fixture
def api_client(api_app):
    return api_app.test_client()
