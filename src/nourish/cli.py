"""nourish command line.

Usage::

    nourish status                      # Windows, repeat flags, pending counts
    nourish window lunch 12:30 14:00    # Change a meal window
    nourish repeat dinner on            # Repeat dinner reminders for 14 days
    nourish schedule breakfast          # (Re)schedule a meal's reminders
    nourish hydrate --interval 60       # Two hydration reminders from now
    nourish ate lunch                   # Had lunch: drop today's nudges, start hydration
    nourish list [meal]                 # Upcoming reminders
    nourish cancel <id>                 # Cancel one reminder
    nourish clear                       # Cancel everything
    nourish suggest dinner              # Dish ideas
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from nourish.config import NourishConfig
from nourish.errors import InvalidWindow, NourishError
from nourish.meals import MealKind, TimeWindow
from nourish.notify.permissions import NotifySendPermissionGate, StaticPermissionGate
from nourish.notify.sqlite import SqliteNotificationScheduler
from nourish.scheduling.models import PendingTrigger, ScheduleOutcome
from nourish.service import ReminderService
from nourish.storage.kv import JsonFileKeyValueStore

logger = logging.getLogger(__name__)

_MEALS = [m.value for m in MealKind]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nourish",
        description="Meal and hydration reminders.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Config YAML path")
    parser.add_argument("--debug", action="store_true", help="Debug logging")
    parser.add_argument(
        "--assume-permission",
        action="store_true",
        help="Skip the notify-send check (headless hosts)",
    )
    sub = parser.add_subparsers(dest="command")
    sub.required = True

    status_p = sub.add_parser("status", help="Show windows and pending counts")
    status_p.add_argument("--json", action="store_true", dest="as_json", help="JSON output")

    window_p = sub.add_parser("window", help="Set a meal window")
    window_p.add_argument("meal", choices=_MEALS)
    window_p.add_argument("start", help="HH:MM")
    window_p.add_argument("end", help="HH:MM")

    repeat_p = sub.add_parser("repeat", help="Toggle 14-day repetition")
    repeat_p.add_argument("meal", choices=_MEALS)
    repeat_p.add_argument("mode", choices=["on", "off"])

    schedule_p = sub.add_parser("schedule", help="Schedule a meal's reminders")
    schedule_p.add_argument("meal", choices=_MEALS)

    hydrate_p = sub.add_parser("hydrate", help="Schedule two hydration reminders")
    hydrate_p.add_argument("--interval", type=int, default=None, help="Minutes between reminders")

    ate_p = sub.add_parser("ate", help="Record a meal and start hydration reminders")
    ate_p.add_argument("meal", choices=_MEALS)
    ate_p.add_argument("--interval", type=int, default=None, help="Minutes between reminders")

    list_p = sub.add_parser("list", help="Upcoming reminders")
    list_p.add_argument("meal", nargs="?", choices=_MEALS, default=None)
    list_p.add_argument("--json", action="store_true", dest="as_json", help="JSON output")

    cancel_p = sub.add_parser("cancel", help="Cancel one reminder")
    cancel_p.add_argument("trigger_id")

    sub.add_parser("clear", help="Cancel all reminders")

    suggest_p = sub.add_parser("suggest", help="Dish ideas for a meal")
    suggest_p.add_argument("meal", choices=_MEALS)

    return parser


def build_service(config: NourishConfig, *, assume_permission: bool = False) -> ReminderService:
    gate = StaticPermissionGate(True) if assume_permission else NotifySendPermissionGate()
    return ReminderService(
        SqliteNotificationScheduler(config.notifications_db_path),
        gate,
        JsonFileKeyValueStore(config.settings_path),
        config=config,
    )


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = NourishConfig.load(args.config)
        level = logging.DEBUG if args.debug else getattr(logging, config.log_level, logging.WARNING)
        logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

        service = build_service(config, assume_permission=args.assume_permission)
        return asyncio.run(_dispatch(service, args))
    except InvalidWindow as exc:
        print(f"❌ {exc.reason}", file=sys.stderr)
        return 2
    except NourishError as exc:
        print(f"❌ {exc.reason}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 2


async def _dispatch(service: ReminderService, args: argparse.Namespace) -> int:
    await service.load()
    handlers = {
        "status": _cmd_status,
        "window": _cmd_window,
        "repeat": _cmd_repeat,
        "schedule": _cmd_schedule,
        "hydrate": _cmd_hydrate,
        "ate": _cmd_ate,
        "list": _cmd_list,
        "cancel": _cmd_cancel,
        "clear": _cmd_clear,
        "suggest": _cmd_suggest,
    }
    handler = handlers.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1
    return await handler(service, args)


# ── Command Handlers ────────────────────────────────────────────


async def _cmd_status(service: ReminderService, args: argparse.Namespace) -> int:
    status = await service.status()
    if args.as_json:
        print(json.dumps(status, indent=2, ensure_ascii=False))
        return 0
    print(f"\n   {'Meal':<12} {'Window':<14} {'Repeat':<8} {'Pending':<8}")
    print(f"   {'─' * 44}")
    for meal in MealKind:
        info: Any = status["meals"][meal.value]
        window = f"{info['window']['start']}–{info['window']['end']}"
        repeat = "on" if info["repeat"] else "off"
        print(f"   {meal.label:<12} {window:<14} {repeat:<8} {info['pending']:<8}")
    print(f"\n   Hydration reminders pending: {status['hydration_pending']}\n")
    return 0


async def _cmd_window(service: ReminderService, args: argparse.Namespace) -> int:
    meal = MealKind(args.meal)
    window = TimeWindow.from_hhmm(args.start, args.end)
    outcome = await service.set_window(meal, window)
    print(f"✅ {meal.label} window: {window}")
    return _print_outcome(outcome) if outcome else 0


async def _cmd_repeat(service: ReminderService, args: argparse.Namespace) -> int:
    meal = MealKind(args.meal)
    outcome = await service.set_repeat(meal, args.mode == "on")
    print(f"✅ {meal.label} repeat: {args.mode}")
    return _print_outcome(outcome) if outcome else 0


async def _cmd_schedule(service: ReminderService, args: argparse.Namespace) -> int:
    return _print_outcome(await service.schedule_meal(MealKind(args.meal)))


async def _cmd_hydrate(service: ReminderService, args: argparse.Namespace) -> int:
    return _print_outcome(await service.schedule_hydration(interval_minutes=args.interval))


async def _cmd_ate(service: ReminderService, args: argparse.Namespace) -> int:
    return _print_outcome(await service.had_meal(MealKind(args.meal), interval_minutes=args.interval))


async def _cmd_list(service: ReminderService, args: argparse.Namespace) -> int:
    if args.meal:
        triggers = await service.upcoming(MealKind(args.meal))
    else:
        triggers = await service.pending()
    if args.as_json:
        print(json.dumps([t.to_dict() for t in triggers], indent=2, ensure_ascii=False))
        return 0
    if not triggers:
        scope = MealKind(args.meal).label if args.meal else "any meal"
        print(f"📭 No reminders scheduled for {scope}.")
        return 0
    for trigger in triggers:
        print(_format_trigger(trigger))
    return 0


async def _cmd_cancel(service: ReminderService, args: argparse.Namespace) -> int:
    if await service.cancel_reminder(args.trigger_id):
        print(f"🗑️ Reminder {args.trigger_id} cancelled.")
        return 0
    print(f"❌ Failed to cancel reminder {args.trigger_id}.", file=sys.stderr)
    return 1


async def _cmd_clear(service: ReminderService, args: argparse.Namespace) -> int:
    await service.clear_all()
    print("🗑️ All reminders cancelled.")
    return 0


async def _cmd_suggest(service: ReminderService, args: argparse.Namespace) -> int:
    meal = MealKind(args.meal)
    print(f"\n🍽️ {meal.label} ideas:\n")
    for dish in service.suggestions(meal):
        print(f"  • {dish.name}")
        print(f"    {dish.recipe}\n")
    return 0


# ── Formatting ──────────────────────────────────────────────────


def _format_trigger(trigger: PendingTrigger) -> str:
    when = trigger.trigger_at.strftime("%H:%M, %b %d")
    return f"  ⏰ [{trigger.id}] {when} - {trigger.body}"


def _print_outcome(outcome: ScheduleOutcome) -> int:
    stream = sys.stdout if outcome.ok else sys.stderr
    print(outcome.message, file=stream)
    return 0 if outcome.ok else 1


if __name__ == "__main__":
    sys.exit(main())
