import itertools
import json
import logging
import shutil
import subprocess
import sys
import threading
import time
from typing import Dict, List, Optional, Any

from akvazure.errors import AzureCLIError

logger = logging.getLogger(__name__)


def _resolve_command_path(cmd: List[str]) -> List[str]:
    """
    Resolve the actual path to the 'az' executable. On Windows this picks up az.cmd.
    """
    resolved = shutil.which(cmd[0])
    if resolved:
        return [resolved] + cmd[1:]
    return list(cmd)


def _should_expect_json(cmd: List[str], capture_output: bool) -> bool:
    if not capture_output:
        return False
    joined = " ".join(cmd).lower()
    # Interactive and context-switching commands do not print JSON
    if "--use-device-code" in joined or " login" in joined or "account set" in joined:
        return False
    return "--output" not in cmd and "-o" not in cmd


def _start_spinner(stop_event: threading.Event) -> None:
    spin = itertools.cycle("|/-\\")
    while not stop_event.is_set():
        sys.stderr.write(f"\r[run_az] {next(spin)} Running Azure CLI...")
        sys.stderr.flush()
        time.sleep(0.1)
    sys.stderr.write("\r" + " " * 50 + "\r")
    sys.stderr.flush()


def _process_success(raw_stdout: str, expect_json: bool) -> Any:
    """
    Parse stdout as JSON when expected. Empty or non-JSON output yields {}.
    """
    if not raw_stdout.strip():
        logger.debug("[run_az] Azure CLI returned empty stdout.")
        return {}
    if not expect_json:
        return {}
    try:
        return json.loads(raw_stdout.strip())
    except json.JSONDecodeError as jde:
        logger.warning(f"[run_az] ⚠️ Expected JSON but got invalid output: {jde}")
        return {}


def run_az(
        cmd: List[str],
        *,
        capture_output: bool = True,
        ignore_errors: Dict[str, List[str]] | None = None,
        spinner: Optional[bool] = None,
) -> Any:
    """
    Run an Azure CLI command and return its parsed JSON output.

    Args:
        cmd: Full command, starting with "az".
        capture_output: Capture stdout/stderr and parse JSON. When False the
            command streams to the console and {} is returned.
        ignore_errors: Mapping of label -> stderr substrings. A failure whose
            stderr contains one of the substrings is logged and returns {}.
        spinner: Show a console spinner while the command runs. Defaults to
            True when stderr is a terminal.

    Returns:
        Parsed JSON (dict, list or scalar) or {} when there is nothing to parse.

    Raises:
        AzureCLIError: The command failed and no ignore rule matched, or the
            az executable could not be started.
    """
    resolved = _resolve_command_path(cmd)
    expect_json = _should_expect_json(resolved, capture_output)
    full_cmd = resolved + (["--output", "json"] if expect_json else [])
    logger.debug(f"[run_az] ▶ Running: {' '.join(cmd)}")

    if spinner is None:
        spinner = capture_output and sys.stderr.isatty()

    stop_event = threading.Event()
    spinner_thread = None
    if spinner:
        spinner_thread = threading.Thread(target=_start_spinner, args=(stop_event,), daemon=True)
        spinner_thread.start()

    try:
        completed = subprocess.run(
            full_cmd,
            capture_output=capture_output,
            text=True,
            check=False,
        )
    except OSError as ex:
        raise AzureCLIError(cmd, -1, f"Could not start Azure CLI: {ex}") from ex
    finally:
        if spinner_thread is not None:
            stop_event.set()
            spinner_thread.join()

    stdout = completed.stdout or ""
    stderr = completed.stderr or ""

    if completed.returncode == 0:
        return _process_success(stdout, expect_json)

    lower_err = stderr.lower()
    for key, substrings in (ignore_errors or {}).items():
        for substr in substrings:
            if substr.lower() in lower_err:
                logger.info(f"[run_az] ℹ️ Ignoring '{substr}' error for '{key}'. Continuing.")
                return {}

    logger.debug(f"[run_az] ❌ Command failed ({completed.returncode}): {stderr.strip()}")
    raise AzureCLIError(cmd, completed.returncode, stderr)
