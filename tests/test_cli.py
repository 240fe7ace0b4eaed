import json

import pytest
import toml
from click.testing import CliRunner

from akvazure.models import ItemKind
from cli.main import cli
from conftest import FakeRoles, ROLES
import context._globals as _globals
from context.logger import Logger


@pytest.fixture
def settings_path(tmp_path):
    path = tmp_path / "akvtools_settings.toml"
    path.write_text(toml.dumps({"akvtools": {
        "log_dir": str(tmp_path / "logs"),
        "backup_root": str(tmp_path / "backups"),
    }}))
    return path


@pytest.fixture
def invoke(settings_path, reset_logger):
    """
    Runs the CLI with the settings file above and a pipeline factory returning `pipeline`.
    """
    def _invoke(args, pipeline=None, input=None):
        Logger.reset()
        obj = {}
        if pipeline is not None:
            obj["factory"] = lambda settings, auto_approve, confirm: pipeline
        base = ["--settings", str(settings_path), "--log-level", "WARNING"]
        return CliRunner().invoke(cli, base + args, obj=obj, input=input)
    return _invoke


def test_backup_writes_files_and_summary(invoke, make_pipeline, full_roles, tmp_path):
    out = tmp_path / "out"
    result = invoke(["backup", "--vault", "kv-source", "--dir", str(out)], make_pipeline(full_roles))

    assert result.exit_code == 0, result.output
    assert sorted(p.name for p in out.iterdir()) == [
        "api-key.secret.backup", "db-pass.secret.backup", "tls-cert.cert.backup"
    ]
    assert "Vault: kv-source" in result.output
    assert "exported=2" in result.output


def test_backup_picks_vault_from_menu(invoke, make_pipeline, full_roles, tmp_path):
    out = tmp_path / "out"
    result = invoke(["backup", "--dir", str(out)], make_pipeline(full_roles), input="1\n")

    assert result.exit_code == 0, result.output
    assert "1. kv-source" in result.output
    assert (out / "db-pass.secret.backup").exists()


def test_access_denied_exits_non_zero(invoke, make_pipeline, source_items, tmp_path):
    result = invoke(["backup", "--vault", "kv-source", "--dir", str(tmp_path / "out")],
                    make_pipeline(FakeRoles(), confirm=lambda q: False))

    assert result.exit_code == 1
    assert "Access check failed" in result.output
    assert ROLES[0] in result.output
    assert source_items.item_calls() == []


def test_unknown_vault_exits_non_zero(invoke, make_pipeline, full_roles, tmp_path):
    result = invoke(["backup", "--vault", "kv-nope", "--dir", str(tmp_path)], make_pipeline(full_roles))
    assert result.exit_code == 1
    assert "Setup failed" in result.output


def test_restore_all(invoke, make_pipeline, full_roles, target_items, tmp_path):
    (tmp_path / "db-pass.secret.backup").write_bytes(b"s")
    (tmp_path / "tls-cert.cert.backup").write_bytes(b"c")

    result = invoke(["restore", "--vault", "kv-target", "--dir", str(tmp_path), "--mode", "all"],
                    make_pipeline(full_roles))

    assert result.exit_code == 0, result.output
    assert "restored=1" in result.output
    assert set(target_items.store[ItemKind.SECRET]) == {"db-pass"}
    assert set(target_items.store[ItemKind.CERTIFICATE]) == {"tls-cert"}


def test_restore_single_file_from_menu(invoke, make_pipeline, full_roles, target_items, tmp_path):
    (tmp_path / "db-pass.secret.backup").write_bytes(b"s")
    (tmp_path / "tls-cert.cert.backup").write_bytes(b"c")

    result = invoke(["restore", "--vault", "kv-target", "--dir", str(tmp_path), "--mode", "single"],
                    make_pipeline(full_roles), input="2\n")

    assert result.exit_code == 0, result.output
    assert [c[2] for c in target_items.item_calls()] == ["tls-cert"]


def test_restore_item_failure_still_exits_zero(invoke, make_pipeline, full_roles, target_items, tmp_path):
    (tmp_path / "db-pass.secret.backup").write_bytes(b"s")
    target_items.fail_import.add("db-pass")

    result = invoke(["restore", "--vault", "kv-target", "--dir", str(tmp_path), "--mode", "all"],
                    make_pipeline(full_roles))

    assert result.exit_code == 0
    assert "db-pass [secret]" in result.output


def test_vaults_lists_names(invoke, make_pipeline, full_roles):
    result = invoke(["vaults"], make_pipeline(full_roles))
    assert result.exit_code == 0
    assert "kv-source" in result.output and "kv-target" in result.output


def test_config_set_and_show(invoke):
    result = invoke(["config", "set", "propagation_timeout", "30"])
    assert result.exit_code == 0, result.output

    shown = invoke(["config", "show"])
    body = shown.output.split("\n", 1)[1]
    assert json.loads(body)["akvtools"]["propagation_timeout"] == 30


def test_config_set_unknown_key(invoke):
    result = invoke(["config", "set", "colour", "blue"])
    assert result.exit_code != 0
    assert "Unknown setting" in result.output


def test_config_set_invalid_value_is_rejected(invoke, settings_path):
    before = settings_path.read_text()

    result = invoke(["config", "set", "propagation_timeout", "abc"])

    assert result.exit_code == 1
    assert "Invalid setting" in result.output
    assert settings_path.read_text() == before
    assert invoke(["config", "get", "log_level"]).exit_code == 0


def test_config_set_repairs_hand_broken_file(invoke, settings_path):
    settings_path.write_text(toml.dumps({"akvtools": {"propagation_timeout": "abc"}}))

    assert invoke(["vaults"]).exit_code == 1
    result = invoke(["config", "set", "propagation_timeout", "15"])

    assert result.exit_code == 0, result.output
    assert toml.loads(settings_path.read_text())["akvtools"]["propagation_timeout"] == 15


def test_config_get(invoke):
    invoke(["config", "set", "auto_approve", "true"])
    result = invoke(["config", "get", "auto_approve"])
    assert result.exit_code == 0
    assert result.output.strip() == "true"


def test_config_validate(invoke, settings_path, tmp_path):
    # the fixture file only sets two keys
    result = invoke(["config", "validate"])
    assert result.exit_code == 1
    assert "Missing required config key" in result.output

    full = dict(_globals.GLOBAL_CFG_DEFAULT["akvtools"], log_dir=str(tmp_path / "logs"))
    settings_path.write_text(toml.dumps({"akvtools": full}))
    result = invoke(["config", "validate"])
    assert result.exit_code == 0, result.output
    assert "is valid" in result.output
