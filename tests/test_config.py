import os

import pytest

from lntop import config
from lntop.errors import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in list(config.ENV_OVERRIDES) + ["LNTOP_CONF"]:
        monkeypatch.delenv(name, raising=False)


def test_parse_reads_keys_and_resolves_relative_paths(tmp_path):
    text = """
    # lnd on the local box
    [lntop]
    network=testnet
    rest_url=https://node.local:8080
    macaroon=data/readonly.macaroon
    tls_cert=/etc/lnd/tls.cert
    timeout=2.5
    poll_interval=10
    log_level=debug
    """
    cfg = config.parse(text, str(tmp_path))
    assert cfg.network == "testnet"
    assert cfg.rest_url == "https://node.local:8080"
    assert cfg.macaroon == os.path.join(str(tmp_path), "data", "readonly.macaroon")
    assert cfg.tls_cert == "/etc/lnd/tls.cert"
    assert cfg.timeout == 2.5
    assert cfg.poll_interval == 10.0
    assert cfg.log_level == "debug"


@pytest.mark.parametrize(
    "text, message",
    [
        ("timeout=soon", "expected a number"),
        ("poll_interval=0", "must be positive"),
        ("colour=blue", "unknown key"),
        ("just some words", "expected key=value"),
    ],
)
def test_parse_rejects_bad_lines(text, message):
    with pytest.raises(ConfigError, match=message):
        config.parse(text)


def test_load_missing_default_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv("LNTOP_CONF", str(tmp_path / "absent.conf"))
    assert config.load() == config.Config()


def test_load_missing_explicit_file_fails(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        config.load(str(tmp_path / "absent.conf"))


def test_env_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "lntop.conf"
    path.write_text("rest_url=https://file:8080\nlog_level=INFO\n")
    monkeypatch.setenv("LNTOP_REST_URL", "https://env:8080")
    cfg = config.load(str(path))
    assert cfg.rest_url == "https://env:8080"
    assert cfg.log_level == "INFO"
