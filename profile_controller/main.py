import argparse
import asyncio
import importlib
import inspect
import logging

import yaml

from profile_controller import __version__
from .config import ControllerConfig
from .pod_defaults import PodDefaultsError
from .pod_defaults import parse_pod_defaults


logger = logging.getLogger(__name__)


def pod_defaults_type(value):
    try:
        return parse_pod_defaults(value)
    except PodDefaultsError as e:
        raise argparse.ArgumentTypeError(f"invalid pod defaults: {e}")


def coroutine_function(value):
    module_name, attr_path = value.rsplit(".", 1)
    module = importlib.import_module(module_name)
    function = getattr(module, attr_path)
    if not inspect.iscoroutinefunction(function):
        raise ValueError(f"Not a coroutine (async) function: {value}")
    return function


def parse_args(argv=None):

    parser = argparse.ArgumentParser(description=f"Profile Controller v{__version__}")
    parser.add_argument(
        "--version", action="version", version=f"profile-controller {__version__}"
    )
    parser.add_argument(
        "--metrics-addr",
        default=":8080",
        help="The address the metric endpoint binds to (default: :8080)",
    )
    parser.add_argument(
        "--enable-leader-election",
        action="store_true",
        help="Enable leader election for controller manager. Enabling this will ensure there is only one active controller manager.",
    )
    parser.add_argument(
        "--leader-election-namespace",
        default="",
        help="Determines the namespace in which the leader election configmap will be created.",
    )
    parser.add_argument(
        "--userid-header",
        default="x-goog-authenticated-user-email",
        help="Key of request header containing user id (default: x-goog-authenticated-user-email)",
    )
    parser.add_argument(
        "--userid-prefix",
        default="accounts.google.com:",
        help="Request header user id common prefix (default: accounts.google.com:)",
    )
    parser.add_argument(
        "--workload-identity",
        default="",
        help="Default identity (GCP service account) for workload_identity plugin",
    )
    parser.add_argument(
        "--pd",
        "--pod-defaults",
        dest="pod_defaults",
        type=pod_defaults_type,
        help="Comma-separated list of PodDefaults spec fields per selector, e.g. 'my-pods.labels.project=shared,my-pods.labels.team=infra'",
        default={},
    )
    parser.add_argument(
        "--reconciler-hook",
        type=coroutine_function,
        help="Optional hook (name of a coroutine like 'mymodule.myfunc') to run with the resolved controller configuration",
    )
    parser.add_argument(
        "--dump-pod-defaults",
        action="store_true",
        help="Print the parsed pod defaults as YAML and exit",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Run in debugging mode (log more)"
    )
    args = parser.parse_args(argv)
    return args


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)

    config_str = ", ".join(f"{k}={v}" for k, v in sorted(vars(args).items()))
    logger.info(f"Profile Controller v{__version__} started with {config_str}")

    config = ControllerConfig.from_args(args)

    if args.dump_pod_defaults:
        print(yaml.dump(args.pod_defaults, default_flow_style=False), end="")
    elif args.reconciler_hook:
        asyncio.run(args.reconciler_hook(config))
    else:
        logger.warning("No reconciler hook configured, nothing to run")
    return config
