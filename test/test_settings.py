import pytest

from maintdesk import runtime
from maintdesk.settings import get_settings


def test_defaults(monkeypatch):
    for name in ("API_TOKEN", "DEFAULT_PER_PAGE", "MCP_PORT", "API_HTTP_TIMEOUT_S"):
        monkeypatch.delenv(name, raising=False)

    s = get_settings()

    assert s.API_BASE_URL == "http://api.test"
    assert s.API_TOKEN == ""
    assert s.API_HTTP_TIMEOUT_S == 30.0
    assert s.DEFAULT_PER_PAGE == 15
    assert s.MCP_PORT == 4010
    assert s.SEARCH_DEBOUNCE_MS == 30


def test_invalid_int(monkeypatch):
    monkeypatch.setenv("MCP_PORT", "http")
    with pytest.raises(RuntimeError):
        get_settings()


def test_retries_must_be_positive(monkeypatch):
    monkeypatch.setenv("API_HTTP_RETRIES", "0")
    with pytest.raises(RuntimeError):
        get_settings()


def test_base_url_trailing_slash(monkeypatch):
    monkeypatch.setenv("API_BASE_URL", "http://api.test/ ")
    assert get_settings().API_BASE_URL == "http://api.test"


def test_init_runtime_loads_dev_env(monkeypatch):
    loaded = []
    monkeypatch.delenv("IS_DOCKER", raising=False)
    monkeypatch.setenv("ENV", "dev")
    monkeypatch.setattr(runtime, "load_dotenv", lambda path, override: loaded.append((path, override)))

    runtime.init_runtime()

    path, override = loaded[0]
    assert path.name == "dev.env"
    assert path.parent.name == "deploy"
    assert override is False


def test_init_runtime_skipped_in_docker(monkeypatch):
    loaded = []
    monkeypatch.setenv("IS_DOCKER", "1")
    monkeypatch.setattr(runtime, "load_dotenv", lambda *a, **kw: loaded.append(a))

    runtime.init_runtime()

    assert loaded == []


def test_init_runtime_missing_prod_env(monkeypatch):
    monkeypatch.delenv("IS_DOCKER", raising=False)
    monkeypatch.setenv("ENV", "prod")
    with pytest.raises(RuntimeError):
        runtime.init_runtime()
