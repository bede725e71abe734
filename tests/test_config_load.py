import pathlib

import pytest

from common.settings import load_settings

ROOT = pathlib.Path(__file__).resolve().parents[1]

ENV_VARS = (
    "DB_DRIVER", "SQLITE_PATH", "DB_NAME", "DB_USER", "DB_PASSWORD", "DB_HOST", "DB_PORT", "DB_SSL",
    "INDEXER_DEMO_MODE", "LOG_LEVEL", "INDEXER_API_URL", "NEXT_PUBLIC_BACKEND_API_URL", "NEXT_PUBLIC_API_URL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_config_file_exists_and_has_placeholders():
    cfg = ROOT / "config.yaml"
    assert cfg.exists(), "config.yaml missing at project root"
    text = cfg.read_text(encoding="utf-8")

    forbidden = ["http://", "https://", "AKIA", "AIza", "secret:", "token:", "key:"]

    def safe(line: str) -> bool:
        if "${" in line:
            return True
        return not any(bad in line for bad in forbidden)

    assert all(safe(line) for line in text.splitlines()), "config.yaml contains potential secrets or live URLs"


def test_project_config_loads_with_placeholder_fallback(clean_env):
    s = load_settings(str(ROOT / "config.yaml"))
    assert s.db.driver == "sqlite"
    # ${DB_NAME} etc are unresolved so model defaults apply
    assert s.db.name == "root"
    assert s.db.password == "password"
    assert s.api.port == 3000
    assert s.dashboard.api_url == "http://localhost:3000"
    assert s.demo.enabled is True


def test_missing_file_means_defaults(clean_env, tmp_path):
    s = load_settings(str(tmp_path / "missing.yaml"))
    assert s.db.sqlite_path == "data/dev.db"
    assert s.api.max_limit == 1000
    assert s.tokens == {}


def test_env_overrides(clean_env, tmp_path):
    clean_env.setenv("DB_DRIVER", "postgresql")
    clean_env.setenv("DB_NAME", "indexer")
    clean_env.setenv("DB_PORT", "6543")
    clean_env.setenv("DB_SSL", "true")
    clean_env.setenv("INDEXER_DEMO_MODE", "off")
    clean_env.setenv("LOG_LEVEL", "debug")
    clean_env.setenv("NEXT_PUBLIC_API_URL", "api.internal:8080/")

    s = load_settings(str(ROOT / "config.yaml"))
    assert s.db.driver == "postgres"
    assert s.db.name == "indexer"
    assert s.db.port == 6543
    assert s.db.ssl is True
    assert s.demo.enabled is False
    assert s.log_level == "DEBUG"
    assert s.dashboard.api_url == "http://api.internal:8080"


def test_yaml_values_and_tokens(clean_env, tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "db:\n  sqlite_path: /tmp/x.db\n"
        "dashboard:\n  poll_seconds: 15\n"
        "tokens:\n  '0xabc': ABC\n"
    )
    s = load_settings(str(cfg))
    assert s.db.sqlite_path == "/tmp/x.db"
    assert s.dashboard.poll_seconds == 15
    assert s.tokens == {"0xabc": "ABC"}


@pytest.mark.parametrize("body", ["dashboard:\n  poll_seconds: 5\n", "db:\n  driver: mongo\n"])
def test_invalid_config_names_the_file(clean_env, tmp_path, body):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text(body)
    with pytest.raises(RuntimeError) as exc:
        load_settings(str(cfg))
    assert "bad.yaml" in str(exc.value)
