import argparse
import logging

import pytest

from profile_controller.config import ControllerConfig
from profile_controller.main import coroutine_function
from profile_controller.main import main
from profile_controller.main import parse_args
from profile_controller.main import pod_defaults_type


def test_parse_defaults():
    args = parse_args([])
    assert args.metrics_addr == ":8080"
    assert not args.enable_leader_election
    assert args.leader_election_namespace == ""
    assert args.userid_header == "x-goog-authenticated-user-email"
    assert args.userid_prefix == "accounts.google.com:"
    assert args.workload_identity == ""
    assert args.pod_defaults == {}
    assert args.reconciler_hook is None


def test_parse_pod_defaults():
    args = parse_args(["--pd=a.labels.project=x,a.labels.team=y,b.labels.project=x"])
    assert args.pod_defaults == {
        "a": {"labels": ["project=x", "team=y"]},
        "b": {"labels": ["project=x"]},
    }
    args = parse_args(["--pod-defaults", "c.labels.team = infra"])
    assert args.pod_defaults == {"c": {"labels": ["team=infra"]}}


def test_parse_invalid_pod_defaults(capsys):
    with pytest.raises(SystemExit) as excinfo:
        parse_args(['--pd=a.labels.note="unterminated'])
    assert excinfo.value.code == 2
    assert "unmatched unescaped quote" in capsys.readouterr().err


def test_pod_defaults_type():
    assert pod_defaults_type("") == {}
    with pytest.raises(argparse.ArgumentTypeError) as excinfo:
        pod_defaults_type("nodots")
    assert "invalid pod defaults" in str(excinfo.value)


def test_coroutine_function():
    hook = coroutine_function("profile_controller.example_hooks.log_pod_defaults")
    assert hook.__name__ == "log_pod_defaults"
    with pytest.raises(ValueError):
        coroutine_function("profile_controller.main.parse_args")


def test_main_dump_pod_defaults(capsys):
    config = main(["--pd=a.labels.project=x", "--dump-pod-defaults"])
    assert config.labels("a") == ["project=x"]
    assert capsys.readouterr().out == "a:\n  labels:\n  - project=x\n"


def test_main_runs_reconciler_hook(monkeypatch):
    received = []

    async def reconciler(config):
        received.append(config)

    monkeypatch.setattr(
        "profile_controller.main.coroutine_function", lambda value: reconciler
    )
    config = main(
        ["--pd=a.labels.project=x", "--userid-prefix=", "--reconciler-hook=foo.bar"]
    )
    assert received == [config]
    assert isinstance(config, ControllerConfig)
    assert config.userid_prefix == ""


def test_main_without_reconciler_hook(caplog):
    with caplog.at_level(logging.WARNING):
        main([])
    assert "No reconciler hook configured" in caplog.text
