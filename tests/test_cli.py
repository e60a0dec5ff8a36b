"""CLI exit codes and startup ordering, with node, app and pubsub replaced."""

import pytest

from lntop import cli, logging_setup
from lntop.errors import BindingSetupError
from lntop.events import DomainEvent, EventKind
from tests.fakes import FakeSource


class _PubSub:
    instances: list["_PubSub"] = []

    def __init__(self, source, feed, interval=3.0, call_timeout=5.0):
        self.feed = feed
        self.started = False
        self.stopped = False
        _PubSub.instances.append(self)

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True
        self.feed.close()


@pytest.fixture
def conf(tmp_path, monkeypatch):
    monkeypatch.delenv("LNTOP_REST_URL", raising=False)
    monkeypatch.setenv("LNTOP_LOG_FILE", str(tmp_path / "lntop.log"))
    monkeypatch.setattr(logging_setup, "configure", lambda *args, **kwargs: None)
    path = tmp_path / "lntop.conf"
    path.write_text("rest_url=https://127.0.0.1:8080\npoll_interval=1\n")
    return str(path)


@pytest.fixture
def node(monkeypatch):
    source = FakeSource()
    monkeypatch.setattr(cli.LndClient, "from_config", classmethod(lambda cls, cfg: source))
    _PubSub.instances = []
    monkeypatch.setattr(cli, "PubSub", _PubSub)
    return source


def test_missing_config_exits_nonzero(tmp_path, capsys):
    assert cli.main(["-c", str(tmp_path / "missing.conf")]) == 1
    assert "config file not found" in capsys.readouterr().err


def test_wallet_balance_prints_total(conf, node, capsys):
    assert cli.main(["-c", conf, "wallet-balance"]) == 0
    assert capsys.readouterr().out.strip() == "150000"


def test_wallet_balance_failure_exits_nonzero(conf, node, capsys):
    node.fail = {"get_wallet_balance"}
    assert cli.main(["-c", conf, "wallet-balance"]) == 1
    assert "connection refused" in capsys.readouterr().err


def test_dashboard_bootstrap_failure_aborts_before_ui(conf, node, monkeypatch):
    node.fail = {"get_channels_balance"}

    def no_app(*args, **kwargs):
        raise AssertionError("app must not start")

    monkeypatch.setattr(cli, "LntopApp", no_app)
    assert cli.main(["-c", conf]) == 1
    assert node.calls == ["get_info", "get_wallet_balance", "get_channels_balance"]
    assert _PubSub.instances[0].started
    assert _PubSub.instances[0].stopped


def test_dashboard_runs_app_after_bootstrap(conf, node, monkeypatch):
    ran = []

    class FakeApp:
        def __init__(self, controller, feed):
            self.controller = controller
            self.feed = feed

        def run(self):
            ran.append(self.controller.models.info.alias)

    monkeypatch.setattr(cli, "LntopApp", FakeApp)
    assert cli.main(["-c", conf, "-v"]) == 0
    assert ran == ["alice"]
    assert _PubSub.instances[0].stopped


def test_binding_setup_failure_exits_nonzero(conf, node, monkeypatch):
    def broken_app(controller, feed):
        raise BindingSetupError("no handler for 'toggle_help' bound to 'f1'")

    monkeypatch.setattr(cli, "LntopApp", broken_app)
    assert cli.main(["-c", conf]) == 1
    assert _PubSub.instances[0].stopped


def test_pubsub_prints_events(conf, node, monkeypatch, capsys):
    class OneShot(_PubSub):
        def start(self):
            self.feed.publish(DomainEvent(EventKind.BLOCK_RECEIVED, 800_001))
            self.feed.close()

    monkeypatch.setattr(cli, "PubSub", OneShot)
    assert cli.main(["-c", conf, "pubsub"]) == 0
    assert capsys.readouterr().out.strip() == "block.received 800001"


def test_unwritable_log_file_exits_nonzero(conf, node, monkeypatch, capsys):
    def denied(*args, **kwargs):
        raise PermissionError(13, "Permission denied", "/var/log/lntop/lntop.log")

    monkeypatch.setattr(logging_setup, "configure", denied)
    assert cli.main(["-c", conf, "wallet-balance"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("lntop: log file:")
    assert "Permission denied" in err
    assert node.calls == []
