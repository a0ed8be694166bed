"""Shared test fixtures for azext_ideafy tests."""

import copy
import json
from unittest.mock import MagicMock, patch

import pytest
import yaml

from azext_ideafy.config import DEFAULT_CONFIG


# ------------------------------------------------------------------
# Global: prevent real telemetry HTTP calls during tests
# ------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _no_telemetry_network():
    """Prevent telemetry from making real HTTP requests during tests.

    The @track decorator fires on every ideafy_* command.  When a
    connection string is configured, _send_envelope() would POST to
    App Insights on every test invocation.  This fixture stubs it.
    """
    with patch("azext_ideafy.telemetry._send_envelope", return_value=True):
        yield


@pytest.fixture(autouse=True)
def _no_env_overrides(monkeypatch):
    """Keep a developer's IDEAFY_* variables out of the tests."""
    monkeypatch.delenv("IDEAFY_API_URL", raising=False)
    monkeypatch.delenv("IDEAFY_TIMEOUT", raising=False)


def envelope_line(step, content=None) -> str:
    """One wire line for an envelope, without the trailing newline."""
    return json.dumps({"step": step, "content": content})


def stream_bytes(*lines: str) -> bytes:
    """Join wire lines into a newline-terminated byte stream."""
    return "".join(line + "\n" for line in lines).encode("utf-8")


class FakeClient:
    """Stands in for AnalyzeClient: yields preset chunks from open_stream."""

    def __init__(self, chunks=(), error=None):
        self.chunks = list(chunks)
        self.error = error
        self.requests = []
        self.closed = False

    def open_stream(self, request):
        from contextlib import contextmanager

        @contextmanager
        def _stream():
            self.requests.append(request)
            if self.error is not None:
                raise self.error
            try:
                yield iter(self.chunks)
            finally:
                self.closed = True

        return _stream()


@pytest.fixture
def sample_stream():
    """A realistic stream: transport markers, progress, then the three domains."""
    return stream_bytes(
        envelope_line("init", "starting"),
        envelope_line("http", {"status": 200}),
        envelope_line("progress", "Researching market trends..."),
        "[debug] worker 3 picked up job",
        envelope_line("idea_validation", {
            "market_score": 7,
            "competition_score": 4,
            "risks": ["saturation"],
            "summary": "ok",
        }),
        envelope_line("legal_analysis", "legal_risks=['GDPR exposure'] recommended_steps=['Hire counsel'] summary='Manageable'"),
        envelope_line("swot_analysis", {
            "strengths": ["Brand"],
            "weaknesses": [],
            "opportunities": ["Export"],
            "threats": ["Copycats"],
            "scenarios": ["Best case"],
            "summary": "Balanced",
        }),
        envelope_line("overall_summary", "Strong demand. Legal work is needed."),
    )


@pytest.fixture
def fake_client():
    return FakeClient


@pytest.fixture
def tmp_config_dir(tmp_path):
    """A working directory for ideafy.yaml."""
    config_dir = tmp_path / "workspace"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def sample_config():
    """Return a deep copy of the default config with test values."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    config["api"]["url"] = "https://ideas.example.com/analyze"
    config["api"]["timeout"] = 30
    return config


@pytest.fixture
def config_with_file(tmp_config_dir, sample_config):
    """A working directory with a populated ideafy.yaml."""
    with open(tmp_config_dir / "ideafy.yaml", "w", encoding="utf-8") as f:
        yaml.dump(sample_config, f, default_flow_style=False)
    return tmp_config_dir


@pytest.fixture
def mock_cmd():
    """The Azure CLI command context passed as the first argument."""
    return MagicMock()
