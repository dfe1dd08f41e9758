import pytest

from bill_connector.config import settings
from bill_connector.config.settings import ConnectorConfig, apply_overrides, load_settings, validate_config
from bill_connector.core.bill import BASE_URL, REQUEST_TIMEOUT, SANDBOX_BASE_URL


def make_config(**overrides):
    base = dict(
        username="u",
        password="p",
        organization_ids=["org-1"],
        developer_key="k",
    )
    base.update(overrides)
    return ConnectorConfig(**base)


@pytest.fixture()
def fake_secrets_dir(monkeypatch, tmp_path):
    """Point /run/secrets at a temporary directory."""
    real_path = settings.Path

    def fake_path(target):
        if str(target) == "/run/secrets":
            return tmp_path
        return real_path(target)

    monkeypatch.setattr(settings, "Path", fake_path)
    return tmp_path


def test_load_settings_reads_environment(monkeypatch, fake_secrets_dir):
    monkeypatch.setenv("BATON_BILL_USERNAME", "alice")
    monkeypatch.setenv("BATON_BILL_PASSWORD", "pw")
    monkeypatch.setenv("BATON_BILL_ORGANIZATION_IDS", "org-1, org-2,,")
    monkeypatch.setenv("BATON_BILL_DEVELOPER_KEY", "dev")
    monkeypatch.setenv("BATON_BILL_LOG_LEVEL", "debug")

    config = load_settings()

    assert config.username == "alice"
    assert config.password == "pw"
    assert config.organization_ids == ["org-1", "org-2"]
    assert config.developer_key == "dev"
    assert config.base_url == BASE_URL
    assert config.request_timeout == REQUEST_TIMEOUT
    assert config.log_level == "DEBUG"
    assert config.sandbox is False


def test_secret_files_take_priority_over_environment(monkeypatch, fake_secrets_dir):
    (fake_secrets_dir / "bill_password").write_text("from-file\n")
    monkeypatch.setenv("BATON_BILL_PASSWORD", "from-env")
    monkeypatch.setenv("BATON_BILL_DEVELOPER_KEY", "dev")

    config = load_settings()

    assert config.password == "from-file"
    assert config.developer_key == "dev"


def test_empty_secret_file_falls_back_to_environment(monkeypatch, fake_secrets_dir):
    (fake_secrets_dir / "bill_developer_key").write_text("   ")
    monkeypatch.setenv("BATON_BILL_DEVELOPER_KEY", "dev")

    assert load_settings().developer_key == "dev"


def test_sandbox_flag_selects_sandbox_url(monkeypatch, fake_secrets_dir):
    monkeypatch.setenv("BATON_BILL_SANDBOX", "true")

    config = load_settings()

    assert config.base_url == SANDBOX_BASE_URL
    assert config.sandbox is True


def test_explicit_base_url_wins_over_sandbox(monkeypatch, fake_secrets_dir):
    monkeypatch.setenv("BATON_BILL_SANDBOX", "true")
    monkeypatch.setenv("BATON_BILL_BASE_URL", "https://proxy.internal/api/v2")

    assert load_settings().base_url == "https://proxy.internal/api/v2"


def test_invalid_timeout_raises(monkeypatch, fake_secrets_dir):
    monkeypatch.setenv("BATON_BILL_REQUEST_TIMEOUT", "soon")

    with pytest.raises(RuntimeError, match="REQUEST_TIMEOUT"):
        load_settings()


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"username": ""}, "username is missing"),
        ({"password": ""}, "password is missing"),
        ({"organization_ids": []}, "organizationIds are missing"),
        ({"developer_key": ""}, "developerKey is missing"),
    ],
)
def test_validate_config_names_missing_setting(overrides, message):
    with pytest.raises(ValueError, match=message):
        validate_config(make_config(**overrides))


def test_validate_config_checks_in_order():
    with pytest.raises(ValueError, match="username is missing"):
        validate_config(ConnectorConfig())


def test_validate_config_discovery_allows_missing_organizations():
    validate_config(make_config(organization_ids=[]), require_organizations=False)


def test_apply_overrides_skips_none_and_rejects_unknown():
    config = apply_overrides(make_config(), username=None, developer_key="new-key")

    assert config.username == "u"
    assert config.developer_key == "new-key"

    with pytest.raises(AttributeError):
        apply_overrides(config, not_a_setting="x")


def test_config_repr_hides_secrets():
    text = repr(make_config(password="hunter2", developer_key="dev-secret", snapshot_signing_key="sign"))

    assert "hunter2" not in text
    assert "dev-secret" not in text
    assert "sign'" not in text
