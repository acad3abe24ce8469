"""Node watchdog configuration — loads from environment variables.

Node-level options may also come from a YAML file named by
``NODEWATCH_CONFIG_FILE``; keys in that file override the environment.
"""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

load_dotenv()

# Paths
BASE_DIR = Path(__file__).resolve().parent
LOGS_DIR = Path(os.getenv("NODEWATCH_LOGS_DIR", str(BASE_DIR / "logs")))
LOG_FILE = LOGS_DIR / "nodewatch.log"
LOCK_FILE = LOGS_DIR / "nodewatch.lock"
CONFIG_FILE = os.getenv("NODEWATCH_CONFIG_FILE", "")

# Status API
PORT = int(os.getenv("NODEWATCH_PORT", "5010"))
HOST = os.getenv("NODEWATCH_HOST", "127.0.0.1")
LOG_LEVEL = os.getenv("NODEWATCH_LOG_LEVEL", "INFO")

# Cycle reports kept in memory for /api/cycles
HISTORY_SIZE = int(os.getenv("NODEWATCH_HISTORY_SIZE", "100"))

# Version
VERSION = "1.0.0"

# Node options: name → (env var, default).  None means "derive".
NODE_OPTIONS = {
    "network": ("NODEWATCH_NETWORK", "testnet"),
    "node_host": ("NODEWATCH_NODE_HOST", None),
    "node_url": ("NODEWATCH_NODE_URL", None),
    "reference_url": ("NODEWATCH_REFERENCE_URL", None),
    "registry_url": ("NODEWATCH_REGISTRY_URL", None),
    "unsync_tolerance": ("NODEWATCH_UNSYNC_TOLERANCE", "10"),
    "restart_command": ("NODEWATCH_RESTART_COMMAND", "systemctl restart cnode.service"),
    "fetch_timeout": ("NODEWATCH_FETCH_TIMEOUT", "10"),
    "check_interval": ("NODEWATCH_CHECK_INTERVAL", "300"),
}


class ConfigError(ValueError):
    """Raised at startup when the node configuration is unusable."""


def _read_yaml(path):
    """Return the mapping stored in *path*, or {} if the file is empty."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping.")
    return data


def _as_int(name, value, minimum=0):
    if isinstance(value, float) and not value.is_integer():
        raise ConfigError(f"{name} must be an integer, got {value!r}.")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}.")
    if isinstance(value, bool) or number < minimum:
        raise ConfigError(f"{name} must be an integer >= {minimum}, got {value!r}.")
    return number


def raw_options(environ=None, config_file=None):
    """Collect node options from the environment and optional YAML file."""
    environ = os.environ if environ is None else environ
    options = {}
    for name, (env_var, default) in NODE_OPTIONS.items():
        value = environ.get(env_var, default)
        if value is not None and value != "":
            options[name] = value

    path = config_file if config_file is not None else CONFIG_FILE
    if path:
        for name, value in _read_yaml(path).items():
            if name not in NODE_OPTIONS:
                raise ConfigError(f"Unknown option in {path}: {name}")
            if value is None or value == "":
                continue
            options[name] = value
    return options


def load_identity(environ=None, config_file=None):
    """Build the immutable NodeIdentity used for the life of the process.

    Raises:
        ConfigError: if the node host is missing or a numeric option is
            invalid (e.g. a negative tolerance).
    """
    from nodewatch.models import NodeIdentity

    options = raw_options(environ, config_file)

    node_host = str(options.get("node_host", "")).strip()
    if not node_host:
        raise ConfigError("NODEWATCH_NODE_HOST is required.")
    network = str(options["network"]).strip()

    return NodeIdentity(
        network=network,
        node_host=node_host,
        node_url=str(options.get("node_url") or f"https://{node_host}").rstrip("/"),
        reference_url=str(
            options.get("reference_url")
            or f"https://{network}-financialserver.coti.io"
        ).rstrip("/"),
        registry_url=str(
            options.get("registry_url")
            or f"https://{network}-nodemanager.coti.io"
        ).rstrip("/"),
        unsync_tolerance=_as_int("unsync_tolerance", options["unsync_tolerance"]),
        restart_command=str(options["restart_command"]),
        fetch_timeout=_as_int("fetch_timeout", options["fetch_timeout"], minimum=1),
        check_interval=_as_int("check_interval", options["check_interval"], minimum=1),
    )
