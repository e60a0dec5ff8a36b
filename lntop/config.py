import os
from dataclasses import dataclass, replace
from pathlib import Path

from lntop.errors import ConfigError

DEFAULT_DIR = os.path.expanduser("~/.lntop")
DEFAULT_CONF = os.path.join(DEFAULT_DIR, "lntop.conf")

ENV_OVERRIDES = {
    "LNTOP_REST_URL": "rest_url",
    "LNTOP_TLS_CERT": "tls_cert",
    "LNTOP_MACAROON": "macaroon",
    "LNTOP_LOG_FILE": "log_file",
    "LNTOP_LOG_LEVEL": "log_level",
}


@dataclass(frozen=True)
class Config:
    network: str = "mainnet"
    rest_url: str = "https://127.0.0.1:8080"
    tls_cert: str | None = None
    macaroon: str | None = None
    timeout: float = 5.0
    poll_interval: float = 3.0
    log_file: str = os.path.join(DEFAULT_DIR, "lntop.log")
    log_level: str = "INFO"


def _positive_float(key: str, value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise ConfigError(f"{key}: expected a number, got {value!r}") from None
    if number <= 0:
        raise ConfigError(f"{key}: must be positive, got {value!r}")
    return number


def parse(text: str, conf_dir: str = ".") -> Config:
    """Parse key=value lines into a Config. Relative paths resolve against conf_dir."""
    values: dict[str, object] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#") or line.startswith("["):
            continue
        if "=" not in line:
            raise ConfigError(f"line {lineno}: expected key=value, got {line!r}")
        key, value = line.split("=", 1)
        key = key.strip().lower()
        value = value.strip().strip('"')
        if key in ("timeout", "poll_interval"):
            values[key] = _positive_float(key, value)
        elif key in ("tls_cert", "macaroon", "log_file"):
            path = os.path.expanduser(value)
            if not os.path.isabs(path):
                path = os.path.normpath(os.path.join(conf_dir, path))
            values[key] = path
        elif key in ("network", "rest_url", "log_level"):
            values[key] = value
        else:
            raise ConfigError(f"line {lineno}: unknown key {key!r}")
    return Config(**values)


def load(path: str | None = None) -> Config:
    """Load the config file (missing file means defaults) then apply env overrides."""
    conf_path = Path(path or os.environ.get("LNTOP_CONF", DEFAULT_CONF)).expanduser()
    if conf_path.exists():
        try:
            text = conf_path.read_text()
        except OSError as e:
            raise ConfigError(f"cannot read {conf_path}: {e}") from e
        config = parse(text, str(conf_path.parent))
    elif path:
        raise ConfigError(f"config file not found: {conf_path}")
    else:
        config = Config()

    overrides = {
        field: os.environ[env] for env, field in ENV_OVERRIDES.items() if os.environ.get(env)
    }
    return replace(config, **overrides) if overrides else config
