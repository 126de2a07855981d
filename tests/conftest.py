import pytest
import requests

from stampede_monitor.config import MonitorConfig


class FakeResponse:
    def __init__(self, payload=None, status_code=200, json_error=False):
        self.payload = payload
        self.status_code = status_code
        self.json_error = json_error

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self.json_error:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Stands in for requests.Session / the requests module"""

    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse([])
        self.error = error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append(('GET', url, params))
        if self.error:
            raise self.error
        return self.response

    def post(self, url, json=None, timeout=None):
        self.calls.append(('POST', url, json))
        if self.error:
            raise self.error
        return self.response


class FakeSink:
    def __init__(self, succeed=True):
        self.succeed = succeed
        self.embeds = []
        self.texts = []

    def send_embed(self, title, description, color, url=None):
        self.embeds.append({'title': title, 'description': description, 'color': color})
        return self.succeed

    def send_text(self, content):
        self.texts.append(content)
        return self.succeed


@pytest.fixture
def config(tmp_path):
    return MonitorConfig(
        webhook_url="https://discord.example/webhook",
        state_file=str(tmp_path / "last.json"),
        log_file=None,
        request_delay=0,
        days_ahead=2,
    )


@pytest.fixture
def sink():
    return FakeSink()
