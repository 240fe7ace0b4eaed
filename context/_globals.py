import os
from pathlib import Path

# ─── Root Directory ──────────────────────────────────────────────
GLOBAL_ROOT = Path(os.getcwd()).resolve()

# ─── Settings and Log Paths ──────────────────────────────────────
SETTINGS_ENV_VAR = "AKVTOOLS_SETTINGS"
GLOBAL_CFG_FILE = GLOBAL_ROOT / "akvtools_settings.toml"
GLOBAL_LOG_DIR = GLOBAL_ROOT / "logs"
GLOBAL_BACKUP_ROOT = GLOBAL_ROOT / "akv-backups"

# ─── Default Settings ────────────────────────────────────────────
SECTION = "akvtools"

GLOBAL_CFG_DEFAULT = {
    SECTION: {
        "subscription_id": "",
        "required_roles": ["Key Vault Secrets Officer", "Key Vault Certificates Officer"],
        "propagation_timeout": 15,
        "propagation_poll_interval": 3,
        "backup_root": str(GLOBAL_BACKUP_ROOT),
        "log_dir": str(GLOBAL_LOG_DIR),
        "log_level": "INFO",
        "auto_approve": False,
    }
}

# ─── Required Keys for Validation ───────────────────────────────
GLOBAL_CFG_ENSURE_LIST = list(GLOBAL_CFG_DEFAULT[SECTION].keys())
DENY_LIST = ["changeme", "<placeholder>"]
