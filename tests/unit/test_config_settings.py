import pytest

from azure_directory.config import settings
from azure_directory.config.settings import GraphSettings, _load_secret_from_file, load_settings


@pytest.fixture()
def secrets_dir(monkeypatch, tmp_path):
    """Redirect /run/secrets to an empty temp directory."""
    real_path = settings.Path

    def fake_path(target):
        if str(target) == "/run/secrets":
            return tmp_path
        return real_path(target)

    monkeypatch.setattr(settings, "Path", fake_path)
    return tmp_path


@pytest.fixture()
def azure_env(monkeypatch):
    monkeypatch.setenv("AZURE_TENANT_ID", "tenant-1")
    monkeypatch.setenv("AZURE_CLIENT_ID", "client-1")
    monkeypatch.setenv("AZURE_CLIENT_SECRET", "env-secret")
    monkeypatch.delenv("GRAPH_BASE_URI", raising=False)
    monkeypatch.delenv("GRAPH_REQUEST_TIMEOUT", raising=False)


def test_load_settings_from_environment(azure_env, secrets_dir):
    cfg = load_settings()

    assert cfg.tenant_id == "tenant-1"
    assert cfg.client_id == "client-1"
    assert cfg.client_secret == "env-secret"
    assert cfg.base_uri == "https://graph.microsoft.com/beta/"
    assert cfg.request_timeout == 30.0
    assert cfg.user_fields == ["id", "displayName", "mail", "accountEnabled"]
    assert cfg.group_fields == ["id", "displayName", "description", "mailNickname"]


def test_client_secret_prefers_run_secrets(azure_env, secrets_dir):
    (secrets_dir / "azure_client_secret").write_text("file-secret\n")
    assert load_settings().client_secret == "file-secret"


def test_empty_secret_file_falls_back_to_env(azure_env, secrets_dir):
    (secrets_dir / "azure_client_secret").write_text("   ")
    assert _load_secret_from_file("azure_client_secret", "AZURE_CLIENT_SECRET") == "env-secret"


@pytest.mark.parametrize("missing", ["AZURE_TENANT_ID", "AZURE_CLIENT_ID", "AZURE_CLIENT_SECRET"])
def test_missing_required_variable(monkeypatch, azure_env, secrets_dir, missing):
    monkeypatch.delenv(missing)

    with pytest.raises(RuntimeError, match=missing):
        load_settings()


def test_overrides(monkeypatch, azure_env, secrets_dir):
    monkeypatch.setenv("GRAPH_BASE_URI", "https://graph.microsoft.com/v1.0/")
    monkeypatch.setenv("GRAPH_REQUEST_TIMEOUT", "12.5")

    cfg = load_settings()

    assert cfg.base_uri == "https://graph.microsoft.com/v1.0/"
    assert cfg.request_timeout == 12.5


def test_invalid_timeout(monkeypatch, azure_env, secrets_dir):
    monkeypatch.setenv("GRAPH_REQUEST_TIMEOUT", "soon")

    with pytest.raises(ValueError):
        load_settings()


def test_repr_hides_client_secret():
    cfg = GraphSettings(tenant_id="t", client_id="c", client_secret="do-not-print")
    assert "do-not-print" not in repr(cfg)


def test_explicit_arguments_take_precedence(monkeypatch, azure_env, secrets_dir):
    monkeypatch.setenv("GRAPH_REQUEST_TIMEOUT", "5")

    cfg = load_settings(tenant_id="arg-tenant", client_secret="arg-secret", base_uri="https://graph.example/beta/")

    assert cfg.tenant_id == "arg-tenant"
    assert cfg.client_id == "client-1"
    assert cfg.client_secret == "arg-secret"
    assert cfg.base_uri == "https://graph.example/beta/"
    assert cfg.request_timeout == 5.0


def test_explicit_argument_satisfies_missing_variable(monkeypatch, azure_env, secrets_dir):
    monkeypatch.delenv("AZURE_TENANT_ID")

    assert load_settings(tenant_id="arg-tenant").tenant_id == "arg-tenant"
