import json
import logging
from pathlib import Path

import toml
import yaml

logger = logging.getLogger(__name__)


class FileIO:
    """
    Static methods for reading and writing structured settings files.
    Supports: TOML, JSON, YAML, YML.
    """
    SUPPORTED_FORMATS = ["toml", "json", "yml", "yaml"]

    @staticmethod
    def resolve_extension(path: str | Path) -> str:
        """
        Raises:
            ValueError: If the filetype is unsupported or cannot be inferred.
        """
        suffix = Path(path).suffix.lstrip(".").lower()
        if suffix in FileIO.SUPPORTED_FORMATS:
            return suffix
        raise ValueError(f"[FileIO] Unsupported or unknown filetype for path: {path}")

    @staticmethod
    def read(path: Path) -> dict:
        """
        Reads a settings file based on its extension and returns the parsed mapping.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If file extension is unsupported.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"[FileIO.read] File not found: {path}")

        ext = FileIO.resolve_extension(path)
        if ext == "toml":
            return toml.load(path)
        elif ext == "json":
            return json.loads(path.read_text(encoding="utf-8"))
        else:
            return yaml.safe_load(path.read_text(encoding="utf-8")) or {}

    @staticmethod
    def write(path: Path, data: dict) -> None:
        """
        Serialize `data` to `path`, replacing any existing content.
        """
        path = Path(path)
        ext = FileIO.resolve_extension(path)
        if not isinstance(data, dict):
            raise TypeError(f"[FileIO] Data must be a dict for .{ext}, got {type(data)}")

        path.parent.mkdir(parents=True, exist_ok=True)
        if ext == "toml":
            path.write_text(toml.dumps(data), encoding="utf-8")
        elif ext == "json":
            path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        else:
            path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")

    @staticmethod
    def ensure_file_with_default(path: str | Path, default: dict) -> Path:
        """
        Ensures the file at `path` exists and is non-empty. If not, writes `default` content.

        Raises:
            OSError: If write fails.
        """
        path = Path(path)
        if path.exists() and path.stat().st_size > 0:
            return path

        logger.info(f"[FileIO] {path} missing or empty; writing defaults.")
        try:
            FileIO.write(path, default)
        except (OSError, TypeError) as e:
            raise OSError(f"[FileIO] Failed to write to '{path}': {e}") from e
        return path


read = FileIO.read
write = FileIO.write
ensure_file_with_default = FileIO.ensure_file_with_default
