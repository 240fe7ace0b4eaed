import pytest
import toml

from context.config import Config, Settings


@pytest.fixture
def settings_file(tmp_path):
    return tmp_path / "akvtools_settings.toml"


def test_fetch_creates_defaults(settings_file):
    data = Config.fetch(settings_file)
    assert settings_file.exists()
    assert data["akvtools"]["propagation_timeout"] == 15


def test_settings_defaults(settings_file):
    s = Config.settings(settings_file)
    assert isinstance(s, Settings)
    assert s.required_roles == ["Key Vault Secrets Officer", "Key Vault Certificates Officer"]
    assert s.propagation_poll_interval == 3.0
    assert s.auto_approve is False


def test_settings_reads_file_values(settings_file, tmp_path):
    settings_file.write_text(toml.dumps({"akvtools": {
        "log_level": "debug",
        "backup_root": str(tmp_path / "b"),
        "propagation_timeout": 30,
    }}))
    s = Config.settings(settings_file)
    assert s.log_level == "DEBUG"
    assert s.backup_root == tmp_path / "b"
    assert s.propagation_timeout == 30.0
    assert s.propagation_poll_interval == 3.0


def test_settings_rejects_wrong_role_count(settings_file):
    settings_file.write_text(toml.dumps({"akvtools": {"required_roles": ["Reader"]}}))
    with pytest.raises(RuntimeError, match="exactly two roles"):
        Config.settings(settings_file)


def test_env_var_selects_file(monkeypatch, tmp_path):
    path = tmp_path / "custom.json"
    monkeypatch.setenv("AKVTOOLS_SETTINGS", str(path))
    assert Config.resolve_path() == path
    assert Config.resolve_path(tmp_path / "x.toml") == tmp_path / "x.toml"


def test_write_merges_nested(settings_file):
    Config.write(settings_file, set={"akvtools": {"auto_approve": True}})
    assert Config.get("akvtools", "auto_approve", path=settings_file) is True
    assert Config.get("akvtools", "log_level", path=settings_file) == "INFO"


def test_get_missing_key(settings_file):
    with pytest.raises(RuntimeError):
        Config.get("akvtools", "nope", path=settings_file)


def test_validate_denylisted_value(settings_file):
    Config.write(settings_file, set={"akvtools": {"subscription_id": "changeme"}})
    with pytest.raises(RuntimeError, match="Denylisted"):
        Config.validate(settings_file)


@pytest.mark.parametrize("ext", ["json", "yaml"])
def test_other_formats(tmp_path, ext):
    path = tmp_path / f"settings.{ext}"
    Config.write(path, set={"akvtools": {"log_level": "WARNING"}})
    assert Config.settings(path).log_level == "WARNING"


def test_unsupported_extension_fails(tmp_path):
    path = tmp_path / "settings.ini"
    with pytest.raises(RuntimeError):
        Config.fetch(path)


@pytest.mark.parametrize("key, value", [
    ("propagation_timeout", "abc"),
    ("propagation_poll_interval", None),
    ("required_roles", ["Reader"]),
])
def test_write_rejects_invalid_value_and_keeps_file(settings_file, key, value):
    Config.fetch(settings_file)
    before = settings_file.read_text()

    with pytest.raises(RuntimeError):
        Config.write(settings_file, set={"akvtools": {key: value}})
    assert settings_file.read_text() == before


def test_settings_wraps_conversion_errors(settings_file):
    settings_file.write_text(toml.dumps({"akvtools": {"propagation_timeout": "abc"}}))
    with pytest.raises(RuntimeError, match="Invalid setting"):
        Config.settings(settings_file)


def test_write_repairs_broken_value(settings_file):
    settings_file.write_text(toml.dumps({"akvtools": {"propagation_timeout": "abc"}}))
    Config.write(settings_file, set={"akvtools": {"propagation_timeout": 20}})
    assert Config.settings(settings_file).propagation_timeout == 20.0


def test_validate_returns_settings(settings_file):
    assert Config.validate(settings_file).log_level == "INFO"


def test_validate_missing_key(settings_file):
    settings_file.write_text(toml.dumps({"akvtools": {"log_level": "INFO"}}))
    with pytest.raises(RuntimeError, match="Missing required config key"):
        Config.validate(settings_file)
