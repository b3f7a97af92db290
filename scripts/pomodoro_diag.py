"""Pomodoro MCP diagnostics CLI."""

from __future__ import annotations

import argparse
import json

from pomodoro_mcp.config import PomodoroSettings
from pomodoro_mcp.presets import PresetLoadError, PresetLoader
from pomodoro_mcp.storage import StateStore, StoreUnavailableError
from pomodoro_mcp.timer import badge_text, format_clock, remaining_ms
from pomodoro_mcp.timer.engine import wall_clock_ms


def load_store(settings: PomodoroSettings) -> StateStore:
    try:
        return StateStore(settings.state_path)
    except StoreUnavailableError as exc:
        print(f"Store unavailable: {exc}")
        raise SystemExit(1)


def cmd_state(args: argparse.Namespace) -> None:
    settings = PomodoroSettings()
    store = load_store(settings)
    try:
        state = store.read_state()
    finally:
        store.close()
    if args.json:
        print(json.dumps(state.model_dump(), indent=2))
        return
    now = wall_clock_ms()
    left = remaining_ms(state, now)
    label = f" ({state.task})" if state.task else ""
    print(f"{state.phase}{label} {format_clock(left)} badge={badge_text(state, now)!r}")


def cmd_history(args: argparse.Namespace) -> None:
    settings = PomodoroSettings()
    store = load_store(settings)
    try:
        entries = store.read_history()
    finally:
        store.close()
    if args.limit is not None and args.limit > 0:
        entries = entries[: args.limit]
    print(json.dumps([entry.model_dump() for entry in entries], indent=2))


def cmd_presets(args: argparse.Namespace) -> None:
    settings = PomodoroSettings()
    try:
        presets = PresetLoader(settings.preset_paths).load_all()
    except PresetLoadError as exc:
        print(f"Presets unavailable: {exc}")
        raise SystemExit(1)
    for preset in presets.values():
        print(f"{preset.id}: {preset.title} [{preset.duration_min:g} min]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pomodoro MCP diagnostics")
    sub = parser.add_subparsers(dest="cmd")

    p_state = sub.add_parser("state", help="Show the persisted timer state")
    p_state.add_argument("--json", action="store_true", help="Output JSON")
    p_state.set_defaults(func=cmd_state)

    p_history = sub.add_parser("history", help="List recorded sessions, newest first")
    p_history.add_argument(
        "--limit",
        type=int,
        default=None,
        help="If provided, show only the newest N entries",
    )
    p_history.set_defaults(func=cmd_history)

    p_presets = sub.add_parser("presets", help="List configured presets")
    p_presets.set_defaults(func=cmd_presets)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return
    args.func(args)


if __name__ == "__main__":
    main()
