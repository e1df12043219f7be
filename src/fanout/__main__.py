from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Dict, List

from . import __version__
from .config import RegistryConfig
from .events import Events
from .exceptions import ConfigError, UnhandledErrorEvent
from .policy import guard
from .registry import EventRegistry

logger = logging.getLogger(__name__)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )


def run_greet(registry: EventRegistry, log: List[str], handle_errors: bool) -> None:
    registry.register(Events.GREET, lambda: log.append("hi"))
    registry.register(Events.GREET, lambda: log.append("hello"))
    registry.fire(Events.GREET)


def run_once(registry: EventRegistry, log: List[str], handle_errors: bool) -> None:
    registry.register_once("start", lambda: log.append("started"))
    registry.fire("start")
    registry.fire("start")


def run_error(registry: EventRegistry, log: List[str], handle_errors: bool) -> None:
    def broken(name: str) -> None:
        raise RuntimeError(f"cannot greet {name}")

    registry.register(Events.GREET, lambda name: log.append(f"hi {name}"))
    registry.register(Events.GREET, broken)
    registry.register(Events.GREET, lambda name: log.append(f"hello {name}"))
    if handle_errors:
        registry.register(registry.config.error_event, lambda exc, event: log.append(f"error on {event}: {exc}"))
    guard(registry, Events.GREET, "world")


SCENARIOS: Dict[str, Callable[[EventRegistry, List[str], bool], None]] = {
    "greet": run_greet,
    "once": run_once,
    "error": run_error,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="fanout",
        description="fanout - run an event dispatch scenario and print the listener log",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--scenario", choices=sorted(SCENARIOS), default="greet", help="Scenario to run")
    parser.add_argument("--config", default=None, help="YAML registry config file")
    parser.add_argument("--isolate", action="store_true", help="Keep dispatching when a listener fails")
    parser.add_argument("--handle-errors", action="store_true", help="Register an 'error' event listener")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        config = RegistryConfig.from_sources(file_path=args.config)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2
    # Honor CLI over config sources
    if args.isolate:
        config = config.model_copy(update={"isolate_errors": True})

    registry = EventRegistry(config)
    log: List[str] = []
    try:
        SCENARIOS[args.scenario](registry, log, args.handle_errors)
    except UnhandledErrorEvent as exc:
        for line in log:
            print(line)
        print(f"fatal: {exc}", file=sys.stderr)
        return 1
    for line in log:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
