import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

import context._globals as _globals
from util import error_handling as eh
from util.io import fileio


@dataclass
class Settings:
    subscription_id: str = ""
    required_roles: List[str] = field(
        default_factory=lambda: list(_globals.GLOBAL_CFG_DEFAULT[_globals.SECTION]["required_roles"]))
    propagation_timeout: float = 15
    propagation_poll_interval: float = 3
    backup_root: Path = _globals.GLOBAL_BACKUP_ROOT
    log_dir: Path = _globals.GLOBAL_LOG_DIR
    log_level: str = "INFO"
    auto_approve: bool = False


class Config:
    """
    Settings file manager. Loads TOML, JSON or YAML (detected by extension),
    creating the file with defaults when missing, and supports nested key
    access and merged write-back.
    """

    @staticmethod
    def resolve_path(path: Optional[str | Path] = None) -> Path:
        """
        Explicit path, then $AKVTOOLS_SETTINGS, then ./akvtools_settings.toml.
        """
        if path:
            return Path(path).expanduser()
        env_path = os.environ.get(_globals.SETTINGS_ENV_VAR)
        if env_path:
            return Path(env_path).expanduser()
        return _globals.GLOBAL_CFG_FILE

    @staticmethod
    def build(path: Optional[Path] = None) -> Path:
        path = Config.resolve_path(path)
        try:
            return fileio.ensure_file_with_default(path, _globals.GLOBAL_CFG_DEFAULT)
        except (OSError, ValueError) as e:
            raise RuntimeError(f"[Config.build] Could not build config at {path}: {e}") from e

    @staticmethod
    def dump(path: Optional[Path] = None) -> dict:
        """
        Parse the settings file without creating it.
        """
        path = Config.resolve_path(path)
        try:
            parsed_data = fileio.read(path)
        except FileNotFoundError:
            raise
        except Exception as e:
            raise RuntimeError(f"[Config.dump] Failed to parse config at {path}: {e}") from e
        if not isinstance(parsed_data, dict):
            raise RuntimeError(f"[Config.dump] Parsed config is not a dict: {type(parsed_data)}")
        return parsed_data

    @staticmethod
    def fetch(path: Optional[Path] = None) -> dict:
        """
        Ensures the config file exists, then loads and returns its parsed contents.
        """
        path = Config.resolve_path(path)
        return eh.recall(
            lambda: Config.dump(path),
            lambda: Config.build(path),
        )

    @staticmethod
    def get(*keys, path: Optional[Path] = None) -> Any:
        """
        Retrieves a nested configuration value, e.g. Config.get("akvtools", "log_level").

        Raises:
            RuntimeError: If keys are missing or config is malformed.
        """
        data = Config.fetch(path)
        try:
            for key in keys:
                data = data[key]
            return data
        except (KeyError, TypeError) as e:
            raise RuntimeError(f"[Config.get] Key path {keys} not found or invalid: {e}") from e

    @staticmethod
    def deep_merge(target: dict, updates: dict):
        for k, v in updates.items():
            if isinstance(v, dict) and isinstance(target.get(k), dict):
                Config.deep_merge(target[k], v)
            else:
                target[k] = v

    @staticmethod
    def write(path: Optional[Path] = None, *, set: dict) -> dict:
        """
        Merges `set` into the config file and returns the saved data.

        The merged [akvtools] section is checked first, so an invalid value is
        never written.

        Raises:
            RuntimeError: A merged value is invalid.
        """
        path = Config.resolve_path(path)
        data = copy.deepcopy(Config.fetch(path))
        Config.deep_merge(data, set)
        Config.from_section(data.get(_globals.SECTION) or {})
        fileio.write(path, data)
        return data

    @staticmethod
    def validate(path: Optional[Path] = None) -> Settings:
        """
        Checks that every [akvtools] key is present, holds no placeholder value
        and converts cleanly. Returns the resulting Settings.

        Raises:
            RuntimeError: If any key is missing or has an invalid value.
        """
        section = Config.fetch(path).get(_globals.SECTION) or {}

        for k in _globals.GLOBAL_CFG_ENSURE_LIST:
            if k not in section:
                raise RuntimeError(f"Missing required config key: {k}")
            v = section[k]
            if isinstance(v, str) and v in _globals.DENY_LIST:
                raise RuntimeError(f"Denylisted value detected: {k} -> {v}")
        return Config.from_section(section)

    @staticmethod
    def settings(path: Optional[Path] = None) -> Settings:
        """
        Typed view of the [akvtools] section, with defaults for missing keys.
        """
        return Config.from_section(Config.fetch(path).get(_globals.SECTION) or {})

    @staticmethod
    def from_section(section: dict) -> Settings:
        """
        Build Settings from an [akvtools] mapping without touching any file.

        Raises:
            RuntimeError: A value has the wrong type or cannot be converted.
        """
        values = dict(_globals.GLOBAL_CFG_DEFAULT[_globals.SECTION])
        values.update(section)
        try:
            roles = eh.check_types(list(values["required_roles"]), str, label="required_roles")
            if len(roles) != 2:
                raise RuntimeError(f"[Config.settings] required_roles must name exactly two roles, got {roles}")
            return Settings(
                subscription_id=str(values["subscription_id"] or ""),
                required_roles=roles,
                propagation_timeout=float(values["propagation_timeout"]),
                propagation_poll_interval=float(values["propagation_poll_interval"]),
                backup_root=Path(values["backup_root"]).expanduser(),
                log_dir=Path(values["log_dir"]).expanduser(),
                log_level=str(values["log_level"]).upper(),
                auto_approve=bool(values["auto_approve"]),
            )
        except (TypeError, ValueError) as e:
            raise RuntimeError(f"[Config.settings] Invalid setting: {e}") from e
