import pytest
from workfront_client.core.config import (
    ConnectionConfig,
    api_base_path,
    load_env_config,
    parse_email_aliases,
)
from workfront_client.workfront import Workfront

ENV_VARS = (
    "WORKFRONT_URL",
    "WORKFRONT_API_VERSION",
    "WORKFRONT_API_KEY",
    "WORKFRONT_ALWAYS_USE_GET",
    "WORKFRONT_TIMEOUT_MS",
    "WORKFRONT_EMAIL_ALIASES",
)


@pytest.fixture
def clean_env(monkeypatch):
    # Prevent load_dotenv from repopulating values from .env
    monkeypatch.setattr("workfront_client.core.config.load_dotenv", lambda *a, **k: None)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_load_env_config_reads_all_settings(clean_env):
    clean_env.setenv("WORKFRONT_URL", "https://acme.my.workfront.com/")
    clean_env.setenv("WORKFRONT_API_VERSION", "9.0")
    clean_env.setenv("WORKFRONT_API_KEY", "k1")
    clean_env.setenv("WORKFRONT_ALWAYS_USE_GET", "yes")
    clean_env.setenv("WORKFRONT_TIMEOUT_MS", "1500")
    clean_env.setenv("WORKFRONT_EMAIL_ALIASES", "A@x.com=b@y.com, c@x.com=d@y.com")

    cfg = load_env_config()

    assert cfg.url == "https://acme.my.workfront.com"
    assert cfg.base_path == "/attask/api/v9.0"
    assert cfg.api_key == "k1"
    assert cfg.always_use_get is True
    assert cfg.timeout_ms == 1500
    assert cfg.email_aliases == {"a@x.com": "b@y.com", "c@x.com": "d@y.com"}


def test_load_env_config_defaults(clean_env):
    clean_env.setenv("WORKFRONT_URL", "https://acme.my.workfront.com")

    cfg = load_env_config()

    assert cfg.version == "7.0"
    assert cfg.api_key is None
    assert cfg.always_use_get is False
    assert cfg.timeout_ms == 30_000
    assert cfg.email_aliases == {}


def test_missing_url_raises(clean_env):
    with pytest.raises(ValueError) as exc:
        load_env_config()
    assert "url must be provided" in str(exc.value)


def test_bad_timeout_raises(clean_env):
    clean_env.setenv("WORKFRONT_URL", "https://acme.my.workfront.com")
    clean_env.setenv("WORKFRONT_TIMEOUT_MS", "soon")
    with pytest.raises(ValueError):
        load_env_config()


def test_unrecognized_bool_falls_back_to_default(clean_env):
    clean_env.setenv("WORKFRONT_URL", "https://acme.my.workfront.com")
    clean_env.setenv("WORKFRONT_ALWAYS_USE_GET", "maybe")
    assert load_env_config().always_use_get is False


@pytest.mark.parametrize(
    "version, path",
    [
        ("7.0", "/attask/api/v7.0"),
        ("internal", "/attask/api/internal"),
        ("unsupported", "/attask/api/unsupported"),
    ],
)
def test_api_base_path(version, path):
    assert api_base_path(version) == path


def test_parse_email_aliases_rejects_malformed_entries():
    with pytest.raises(ValueError):
        parse_email_aliases("no-equals-sign")


@pytest.mark.asyncio
async def test_workfront_from_env(clean_env):
    clean_env.setenv("WORKFRONT_URL", "https://acme.my.workfront.com")
    clean_env.setenv("WORKFRONT_API_KEY", "k1")

    async with Workfront.from_env(session_login_delay=0) as wf:
        assert wf.api.api_key == "k1"
        assert wf.config == ConnectionConfig(
            url="https://acme.my.workfront.com", api_key="k1"
        )
        fresh = wf.new_client()
        assert fresh is not wf.api
        assert fresh.http is wf.http
        assert fresh.metadata_cache is wf.metadata_cache
        assert fresh.api_key == "k1"

        wf.set_api_key("k2")
        assert wf.new_client().api_key == "k2"
