import sys
from types import SimpleNamespace

import pytest

import scripts.bill_sync as bill_sync
from bill_connector.core.bill import SANDBOX_BASE_URL, AuthenticationError, ConnectorError, Organization
from bill_connector.core.sync_service import SyncStats

CREDENTIAL_FLAGS = [
    "--username", "u",
    "--password", "p",
    "--developer-key", "k",
]


@pytest.fixture(autouse=True)
def restore_sys_argv():
    """Make sure every test sees a clean CLI invocation."""
    original = sys.argv[:]
    yield
    sys.argv = original


@pytest.fixture()
def captured(monkeypatch):
    """Replace new_connector with a recorder returning a stub connector."""
    state = SimpleNamespace(config=None, connector=SimpleNamespace(
        validate=lambda: None,
        client=SimpleNamespace(get_organizations=lambda: [Organization("org-1", "Acme")]),
    ))

    def fake_new_connector(config):
        state.config = config
        return state.connector

    monkeypatch.setattr(bill_sync, "new_connector", fake_new_connector)
    return state


def test_no_command_prints_help(captured, capsys):
    bill_sync.main([])

    assert "usage:" in capsys.readouterr().out
    assert captured.config is None


def test_missing_username_aborts_before_connecting(captured):
    with pytest.raises(SystemExit) as exc_info:
        bill_sync.main(["validate"])

    assert exc_info.value.code == 2
    assert captured.config is None


def test_validate_requires_organization_ids(captured, capsys):
    with pytest.raises(SystemExit):
        bill_sync.main([*CREDENTIAL_FLAGS, "validate"])

    assert "organizationIds are missing" in capsys.readouterr().err


def test_validate_success(captured, capsys):
    bill_sync.main([*CREDENTIAL_FLAGS, "--organization-ids", "org-1", "validate"])

    assert "[validate] Credentials OK" in capsys.readouterr().err
    assert captured.config.organization_ids == ["org-1"]


def test_organization_ids_flag_is_comma_separated(captured):
    bill_sync.main([*CREDENTIAL_FLAGS, "--organization-ids", "org-1, org-2", "validate"])

    assert captured.config.organization_ids == ["org-1", "org-2"]


def test_validate_failure_exits_non_zero(captured, capsys):
    def fail():
        raise AuthenticationError("invalid credentials")

    captured.connector.validate = fail

    with pytest.raises(SystemExit) as exc_info:
        bill_sync.main([*CREDENTIAL_FLAGS, "--organization-ids", "org-1", "validate"])

    assert exc_info.value.code == 1
    assert "[validate] Error: invalid credentials" in capsys.readouterr().err


def test_orgs_does_not_need_organization_ids(captured, capsys):
    bill_sync.main([*CREDENTIAL_FLAGS, "orgs"])

    assert capsys.readouterr().out == "org-1\tAcme\n"


def test_environment_provides_defaults(monkeypatch, captured):
    monkeypatch.setenv("BATON_BILL_USERNAME", "env-user")
    monkeypatch.setenv("BATON_BILL_PASSWORD", "env-pass")
    monkeypatch.setenv("BATON_BILL_DEVELOPER_KEY", "env-key")
    monkeypatch.setenv("BATON_BILL_ORGANIZATION_IDS", "org-1,org-2")

    bill_sync.main(["--username", "flag-user", "--sandbox", "--timeout", "5", "validate"])

    config = captured.config
    assert config.username == "flag-user"
    assert config.password == "env-pass"
    assert config.organization_ids == ["org-1", "org-2"]
    assert config.base_url == SANDBOX_BASE_URL
    assert config.request_timeout == 5


def test_sync_then_verify(monkeypatch, captured, tmp_path, capsys):
    snapshot = tmp_path / "sync.jsonl"

    class FakeSyncService:
        def __init__(self, connector, writer):
            assert connector is captured.connector
            self.writer = writer

        def run(self):
            self.writer.write("resource", {"id": {"resource_type": "organization", "resource": "org-1"}})
            return SyncStats(resource_types=3, resources=1)

    monkeypatch.setattr(bill_sync, "SyncService", FakeSyncService)

    bill_sync.main([
        *CREDENTIAL_FLAGS, "--organization-ids", "org-1",
        "sync", "--file", str(snapshot), "--signing-key", "sign",
    ])
    assert snapshot.exists()
    assert "1 resources" in capsys.readouterr().err

    with pytest.raises(SystemExit) as exc_info:
        bill_sync.main(["verify", "--file", str(snapshot), "--signing-key", "sign"])
    assert exc_info.value.code == 0
    assert "1/1" in capsys.readouterr().out

    with pytest.raises(SystemExit) as exc_info:
        bill_sync.main(["verify", "--file", str(snapshot), "--signing-key", "wrong"])
    assert exc_info.value.code == 1


def test_verify_missing_snapshot_fails(captured, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        bill_sync.main(["verify", "--file", str(tmp_path / "nope.jsonl"), "--signing-key", "k"])

    assert exc_info.value.code == 1
    assert "[verify] Error: snapshot not found or empty" in capsys.readouterr().err


def test_verify_empty_snapshot_fails(captured, tmp_path):
    snapshot = tmp_path / "sync.jsonl"
    snapshot.write_text("")

    with pytest.raises(SystemExit) as exc_info:
        bill_sync.main(["verify", "--file", str(snapshot), "--signing-key", "k"])

    assert exc_info.value.code == 1


def test_settings_are_loaded_after_logging_is_configured(monkeypatch, captured):
    calls = []
    real_load_settings = bill_sync.load_settings

    monkeypatch.setattr(bill_sync.logging, "basicConfig", lambda **kwargs: calls.append(("logging", kwargs["level"])))

    def recording_load_settings():
        calls.append(("settings", None))
        return real_load_settings()

    monkeypatch.setattr(bill_sync, "load_settings", recording_load_settings)
    monkeypatch.setenv("BATON_BILL_LOG_LEVEL", "debug")

    bill_sync.main([*CREDENTIAL_FLAGS, "--organization-ids", "org-1", "validate"])

    assert calls == [("logging", "DEBUG"), ("settings", None)]
    assert captured.config.log_level == "DEBUG"


def test_invalid_log_level_flag_is_a_usage_error(captured):
    with pytest.raises(SystemExit) as exc_info:
        bill_sync.main(["--log-level", "verbose", "validate"])

    assert exc_info.value.code == 2
    assert captured.config is None


def test_invalid_log_level_env_is_a_usage_error(monkeypatch, captured, capsys):
    monkeypatch.setenv("BATON_BILL_LOG_LEVEL", "VERBOSE")

    with pytest.raises(SystemExit) as exc_info:
        bill_sync.main([*CREDENTIAL_FLAGS, "--organization-ids", "org-1", "validate"])

    assert exc_info.value.code == 2
    assert "invalid log level 'VERBOSE'" in capsys.readouterr().err


def test_invalid_timeout_env_is_a_usage_error(monkeypatch, captured, capsys):
    monkeypatch.setenv("BATON_BILL_REQUEST_TIMEOUT", "soon")

    with pytest.raises(SystemExit) as exc_info:
        bill_sync.main([*CREDENTIAL_FLAGS, "--organization-ids", "org-1", "validate"])

    assert exc_info.value.code == 2
    assert "REQUEST_TIMEOUT must be a number" in capsys.readouterr().err
    assert captured.config is None


def test_sync_failure_leaves_no_snapshot(monkeypatch, captured, tmp_path, capsys):
    snapshot = tmp_path / "sync.jsonl"

    class FailingSyncService:
        def __init__(self, connector, writer):
            pass

        def run(self):
            raise ConnectorError("failed to list organizations")

    monkeypatch.setattr(bill_sync, "SyncService", FailingSyncService)

    with pytest.raises(SystemExit) as exc_info:
        bill_sync.main([*CREDENTIAL_FLAGS, "--organization-ids", "org-1", "sync", "--file", str(snapshot)])

    assert exc_info.value.code == 1
    assert not snapshot.exists()
    assert "[sync] Error: bill-connector: failed to list organizations" in capsys.readouterr().err
