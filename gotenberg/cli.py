"""Command-line entry point: flags, module start-up and graceful shutdown."""

from __future__ import annotations

import itertools
import os
import signal
import sys
import threading
from collections.abc import Iterable, Mapping, Sequence
from datetime import timedelta
from typing import Any

from gotenberg import lifecycle
from gotenberg.context import Context, ModuleLoadError
from gotenberg.debug import build_debug
from gotenberg.flags import FlagError, FlagSet, ParsedFlags, format_duration
from gotenberg.lifecycle import CancelContext, CancelGracefulShutdown
from gotenberg.modules import App, ModuleDescriptor, SystemLogger, get_module_descriptors

GRACEFUL_SHUTDOWN_FLAG = "gotenberg-graceful-shutdown-duration"
BUILD_DEBUG_DATA_FLAG = "gotenberg-build-debug-data"

_WAIT_SECONDS = 0.05

_BANNER = r"""
  _____     __           __               
 / ___/__  / /____ ___  / /  ___ _______ _
/ (_ / _ \/ __/ -_) _ \/ _ \/ -_) __/ _ '/
\___/\___/\__/\__/_//_/_.__/\__/_/  \_, / 
                                   /___/

A containerized API for seamless PDF conversion.
Version: %s
-------------------------------------------------------
"""


def render_banner(version: str) -> str:
    """The start-up banner showing ``version``."""
    return _BANNER % version


def build_flag_set(descriptors: Iterable[ModuleDescriptor]) -> FlagSet:
    """The root flag set holding the application flags and every module's."""
    flag_set = FlagSet("gotenberg")
    flag_set.duration(
        GRACEFUL_SHUTDOWN_FLAG, timedelta(seconds=30), "Set the graceful shutdown duration"
    )
    flag_set.boolean(BUILD_DEBUG_DATA_FLAG, True, "Set if build data is needed")
    for desc in descriptors:
        flag_set.add_flag_set(desc.flag_set)
    return flag_set


def apply_env_overrides(flag_set: FlagSet, environ: Mapping[str, str]) -> None:
    """Override flag values from environment variables.

    ``gotenberg-build-debug-data`` is read from ``GOTENBERG_BUILD_DEBUG_DATA``.
    A slice flag takes the comma-separated values in place of its current ones.
    """

    def override(flag: Any) -> None:
        env_name = flag.name.replace("-", "_").upper()
        raw = environ.get(env_name)
        if raw is None:
            return
        try:
            if flag.is_slice():
                flag.replace(raw.split(","))
            else:
                flag.set(raw)
        except FlagError as err:
            raise FlagError(
                f"invalid overriding value '{raw}' from {env_name}: {err}"
            ) from err

    flag_set.visit_all(override)


def _usage(flag_set: FlagSet) -> str:
    lines = ["Usage of gotenberg:"]
    for flag in flag_set:
        line = f"      --{flag.name} {flag.kind}"
        if flag.usage:
            line += f"   {flag.usage}"
        default = flag.value_string()
        if default not in ("", "[]", "false", "0", "0s"):
            line += f" (default {default})"
        lines.append(line)
    return "\n".join(lines)


def _wants_help(args: Sequence[str]) -> bool:
    options = itertools.takewhile(lambda arg: arg != "--", args)
    return any(arg in ("-h", "--help") for arg in options)


def _module_id(mod: Any) -> str:
    try:
        return mod.descriptor().id
    except AttributeError:
        return type(mod).__name__


def _start_app(app: Any, fatal: list[str], quit_event: threading.Event) -> None:
    mod_id = _module_id(app)
    try:
        app.start()
    except Exception as err:
        fatal.append(f"[FATAL] starting {mod_id}: {err}")
        quit_event.set()
        return
    message = app.startup_message()
    if not message:
        print(f"[SYSTEM] {mod_id}: application started")
        return
    print(f"[SYSTEM] {mod_id}: {message}")


def _print_system_messages(logger: Any) -> None:
    mod_id = _module_id(logger)
    for message in logger.system_messages():
        print(f"[SYSTEM] {mod_id}: {message}")


def _stop_apps(apps: Iterable[Any], ctx: CancelContext) -> list[str]:
    errors: list[str] = []
    lock = threading.Lock()

    def stop(app: Any) -> None:
        mod_id = _module_id(app)
        try:
            app.stop(ctx)
        except CancelGracefulShutdown:
            ctx.cancel()
        except Exception as err:
            with lock:
                errors.append(f"stopping {mod_id}: {err}")
            return
        print(f"[SYSTEM] {mod_id}: application stopped")

    threads = [threading.Thread(target=stop, args=(app,), daemon=True) for app in apps]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return errors


def main(argv: Sequence[str] | None = None) -> int:
    """Run the application until SIGINT or SIGTERM; returns the exit code."""
    args = sys.argv[1:] if argv is None else list(argv)

    print(render_banner(lifecycle.VERSION), end="")

    descriptors = get_module_descriptors()
    flag_set = build_flag_set(descriptors)
    print(f"[SYSTEM] modules: {''.join(desc.id + ' ' for desc in descriptors)}")

    if _wants_help(args):
        print(_usage(flag_set))
        return 0

    try:
        flag_set.parse(args)
    except FlagError as err:
        print(err)
        return 1

    try:
        apply_env_overrides(flag_set, os.environ)
    except FlagError as err:
        print(f"[FATAL] {err}")
        return 1

    parsed_flags = ParsedFlags(flag_set)
    graceful_duration = parsed_flags.must_duration(GRACEFUL_SHUTDOWN_FLAG)
    ctx = Context(parsed_flags, descriptors)

    quit_event = threading.Event()
    fatal: list[str] = []

    def on_quit(signum: int, frame: Any) -> None:
        quit_event.set()

    watched = (signal.SIGINT, signal.SIGTERM)
    previous = {sig: signal.getsignal(sig) for sig in watched}

    try:
        for sig in watched:
            signal.signal(sig, on_quit)

        try:
            apps = ctx.modules(App)
        except ModuleLoadError as err:
            print(f"[FATAL] {err}")
            return 1

        for app in apps:
            threading.Thread(
                target=_start_app, args=(app, fatal, quit_event), daemon=True
            ).start()

        try:
            sys_loggers = ctx.modules(SystemLogger)
        except ModuleLoadError as err:
            print(f"[FATAL] {err}")
            return 1

        logger_threads = [
            threading.Thread(target=_print_system_messages, args=(logger,), daemon=True)
            for logger in sys_loggers
        ]
        for thread in logger_threads:
            thread.start()
        for thread in logger_threads:
            thread.join()

        if parsed_flags.must_bool(BUILD_DEBUG_DATA_FLAG):
            build_debug(ctx)

        while not quit_event.wait(_WAIT_SECONDS):
            pass

        if fatal:
            print(fatal[0])
            return 1

        shutdown_ctx = CancelContext(timeout=graceful_duration.total_seconds())
        signal.signal(signal.SIGINT, lambda signum, frame: shutdown_ctx.cancel())

        print(f"[SYSTEM] graceful shutdown of {format_duration(graceful_duration)}")

        errors = _stop_apps(apps, shutdown_ctx)
        if errors:
            print(f"[FATAL] {errors[0]}")
            return 1
        return 0
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, signal.SIG_DFL if handler is None else handler)


if __name__ == "__main__":
    sys.exit(main())