"""Command-line interface for barista-log."""

import argparse
import asyncio
import logging
import sys
from datetime import date

from barista_log import __version__
from barista_log.core import BaristaLog, open_log, reset_all_data
from barista_log.exceptions import BaristaLogError, ValidationError
from barista_log.forms import ExtractionDraft
from barista_log.media import prepare_photo
from barista_log.preferences import DEFAULTS, parse_value
from barista_log.schema import Bean, Brewer, Equipment, Extraction, Grinder, WeightPrecision
from barista_log.views import (
    days_since,
    equipment_history,
    format_rating,
    group_by_day,
    measurement_fields,
    most_recent,
    previous_extractions,
)

EQUIPMENT_OPTIONS = {
    "bean": (Bean, ["roaster", "origin", "roast_date", "opened_date"]),
    "grinder": (Grinder, ["brand", "burr_type", "burr_size", "adjustment_notes"]),
    "brewer": (Brewer, ["brand", "brew_type", "portafilter_size", "basket_size"]),
}


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    try:
        log = open_log()
        return args.handler(log, args)
    except BaristaLogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="barista-log",
        description="Log espresso shots and the gear behind them",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--version",
        action="version",
        version=f"barista-log {__version__}",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    for kind, (_, fields) in EQUIPMENT_OPTIONS.items():
        group = commands.add_parser(kind, help=f"Manage {kind}s")
        actions = group.add_subparsers(dest="action", required=True)
        add = actions.add_parser("add", help=f"Add a {kind}")
        add.add_argument("name")
        for field in fields:
            add.add_argument(f"--{field.replace('_', '-')}", dest=field)
        add.add_argument("--notes")
        add.add_argument("--photo", help="Path to a photo")
        add.set_defaults(handler=_cmd_add_equipment, kind=kind)

    library = commands.add_parser("library", help="List beans, grinders and brewers")
    library.set_defaults(handler=_cmd_library)

    log = commands.add_parser("log", help="Record an extraction")
    log.add_argument("--bean", help="Bean id or name")
    log.add_argument("--grinder", help="Grinder id or name (default: preferred grinder)")
    log.add_argument("--brewer", help="Brewer id or name (default: preferred brewer)")
    log.add_argument("--grind", help="Grind setting")
    log.add_argument("--dose", type=float, help="Dose in, grams")
    log.add_argument("--yield", dest="yield_out", type=float, help="Yield out, grams")
    log.add_argument("--time", type=float, help="Shot time, seconds")
    log.add_argument("--rating", type=int, choices=range(1, 6))
    log.add_argument("--notes")
    log.add_argument("--from-recent", action="store_true", help="Start from the most recent shot's setup")
    log.set_defaults(handler=_cmd_log)

    history = commands.add_parser("history", help="Show extractions grouped by day")
    history.set_defaults(handler=_cmd_history)

    show = commands.add_parser("show", help="Show one extraction or piece of equipment")
    show.add_argument("identity")
    show.set_defaults(handler=_cmd_show)

    delete = commands.add_parser("delete", help="Delete an extraction or piece of equipment")
    delete.add_argument("identity")
    delete.set_defaults(handler=_cmd_delete)

    coach = commands.add_parser("coach", help="Get coaching for an extraction")
    coach.add_argument("identity")
    coach.set_defaults(handler=_cmd_coach)

    settings = commands.add_parser("settings", help="Read or change preferences")
    settings_actions = settings.add_subparsers(dest="action", required=True)
    get = settings_actions.add_parser("get")
    get.add_argument("key", nargs="?", choices=sorted(DEFAULTS))
    get.set_defaults(handler=_cmd_settings_get)
    set_ = settings_actions.add_parser("set")
    set_.add_argument("key", choices=sorted(DEFAULTS))
    set_.add_argument("value")
    set_.set_defaults(handler=_cmd_settings_set)

    export = commands.add_parser("export", help="Print all records as JSON")
    export.set_defaults(handler=_cmd_export)

    reset = commands.add_parser("reset", help="Delete all data and restore default settings")
    reset.add_argument("--yes", action="store_true", help="Confirm deleting everything")
    reset.set_defaults(handler=_cmd_reset)

    return parser


def _cmd_add_equipment(log: BaristaLog, args: argparse.Namespace) -> int:
    entity_type, fields = EQUIPMENT_OPTIONS[args.kind]
    values = {field: getattr(args, field) for field in fields}
    for field in ("roast_date", "opened_date"):
        if values.get(field):
            values[field] = date.fromisoformat(values[field])
    image_data = prepare_photo(args.photo) if args.photo else None

    identity = log.store.create(entity_type(name=args.name, notes=args.notes, image_data=image_data, **values))
    print(identity)
    return 0


def _cmd_library(log: BaristaLog, args: argparse.Namespace) -> int:
    snapshot = log.store.snapshot()
    for title, items in (("Beans", snapshot.beans), ("Grinders", snapshot.grinders), ("Brewers", snapshot.brewers)):
        print(f"  {title}")
        if not items:
            print("    -")
        for item in items:
            print(f"    {item.id}  {item.name}")
        print()
    return 0


def _cmd_log(log: BaristaLog, args: argparse.Namespace) -> int:
    snapshot = log.store.snapshot()
    if args.from_recent:
        template = most_recent(snapshot.extractions)
        if template is None:
            raise ValidationError("No previous extraction to start from")
        draft = ExtractionDraft.from_recent(template)
    else:
        draft = ExtractionDraft.new(
            grinders=snapshot.grinders,
            brewers=snapshot.brewers,
            preferences=log.preferences,
        )

    if args.bean:
        draft.bean_id = _resolve(snapshot.beans, args.bean)
    if args.grinder:
        draft.grinder_id = _resolve(snapshot.grinders, args.grinder)
    if args.brewer:
        draft.brewer_id = _resolve(snapshot.brewers, args.brewer)
    if args.grind is not None:
        draft.grind_setting = args.grind
    if args.dose is not None:
        draft.dose_in = args.dose
    if args.yield_out is not None:
        draft.yield_out = args.yield_out
    if args.time is not None:
        draft.time_seconds = args.time
    if args.rating is not None:
        draft.rating = args.rating
    if args.notes is not None:
        draft.notes = args.notes

    print(draft.save(log.store))
    return 0


def _cmd_history(log: BaristaLog, args: argparse.Namespace) -> int:
    groups = group_by_day(log.store.list(Extraction))
    if not groups:
        print("No extractions yet. Add your first shot to get started.")
        return 0

    for group in groups:
        print(f"  {group.label}")
        for extraction in group.extractions:
            bean = extraction.bean_name or "Unknown Bean"
            grinder = extraction.grinder.name if extraction.grinder else "-"
            brewer = extraction.brewer.name if extraction.brewer else "-"
            rating = format_rating(extraction.rating)
            print(f"    {extraction.date:%H:%M}  {bean}  grind {extraction.grind_setting}  {grinder} / {brewer}  {rating}".rstrip())
            print(f"           {extraction.id}")
        print()
    return 0


def _cmd_show(log: BaristaLog, args: argparse.Namespace) -> int:
    entity = log.store.get(args.identity)
    if isinstance(entity, Extraction):
        _print_extraction(log, entity)
    else:
        _print_equipment(log, entity)
    return 0


def _cmd_delete(log: BaristaLog, args: argparse.Namespace) -> int:
    log.store.delete(args.identity)
    print(f"Deleted {args.identity}")
    return 0


def _cmd_coach(log: BaristaLog, args: argparse.Namespace) -> int:
    target = log.store.get(args.identity)
    if not isinstance(target, Extraction):
        raise ValidationError(f"{args.identity} is not an extraction")

    history = previous_extractions(log.store.list(Extraction), target)
    result = asyncio.run(log.coach.analyze(target, history))
    if result.summary:
        print(result.summary)
        return 0
    print(_coaching_message(result.state.value, result.error), file=sys.stderr)
    return 1


def _cmd_settings_get(log: BaristaLog, args: argparse.Namespace) -> int:
    values = log.preferences.as_dict()
    keys = [args.key] if args.key else sorted(values)
    for key in keys:
        value = values[key]
        display = getattr(value, "value", value)
        if isinstance(value, WeightPrecision):
            display = f"{value.value} ({value.label})"
        print(f"{key} = {display}")
    return 0


def _cmd_settings_set(log: BaristaLog, args: argparse.Namespace) -> int:
    log.preferences.set(args.key, parse_value(args.key, args.value))
    return 0


def _cmd_export(log: BaristaLog, args: argparse.Namespace) -> int:
    print(log.store.snapshot().model_dump_json(indent=2))
    return 0


def _cmd_reset(log: BaristaLog, args: argparse.Namespace) -> int:
    if not args.yes:
        print(
            "This deletes all extractions, beans, grinders and brewers and resets all settings. "
            "Re-run with --yes to confirm.",
            file=sys.stderr,
        )
        return 1
    reset_all_data(log.store, log.preferences)
    print("All data deleted.")
    return 0


def _print_extraction(log: BaristaLog, extraction: Extraction) -> None:
    """Print extraction in human-readable format."""
    prefs = log.preferences
    print()
    print(f"  Extraction  {extraction.date:%a %d %b %H:%M}")
    print()

    fields = [
        ("Bean", extraction.bean_name),
        ("Roaster", extraction.bean.roaster if extraction.bean else None),
        ("Grinder", extraction.grinder.name if extraction.grinder else None),
        ("Brewer", extraction.brewer.name if extraction.brewer else None),
        ("Brew Type", extraction.brewer.brew_type if extraction.brewer else None),
        ("Grind", extraction.grind_setting),
        ("Grinder Range", extraction.grinder.adjustment_notes if extraction.grinder else None),
        *measurement_fields(extraction, prefs.weight_unit, prefs.weight_precision),
        ("Rating", format_rating(extraction.rating)),
        ("Notes", extraction.notes),
    ]
    for label, value in fields:
        display = value if value else "-"
        print(f"  {label + ':':<14} {display}")

    status = log.coach.status(extraction.id)
    print(f"  {'Coaching:':<14} {_coaching_message(status.state.value, status.error)}")
    print()


def _print_equipment(log: BaristaLog, entity: Equipment) -> None:
    """Print bean, grinder or brewer details and its recent shots."""
    print()
    print(f"  {entity.name}")
    print()
    skip = {"id", "name", "image_id", "image_data"}
    for field, value in entity.model_dump().items():
        if field in skip or value in (None, ""):
            continue
        label = field.replace("_", " ").title()
        print(f"  {label + ':':<18} {value}")

    if isinstance(entity, Bean):
        if entity.roast_date:
            print(f"  {'Days Since Roast:':<18} {days_since(entity.roast_date)}")
        if entity.opened_date:
            print(f"  {'Days Since Open:':<18} {days_since(entity.opened_date)}")

    history = equipment_history(log.store.related(entity, "extractions"))
    if history.total:
        print()
        print(f"  Extractions ({history.total})")
        for extraction in history.recent:
            print(f"    {extraction.grind_setting:<10} {extraction.date:%d %b}")
        if history.more_label:
            print(f"    {history.more_label}")
    print()


def _coaching_message(state: str, error: str | None) -> str:
    messages = {
        "disabled": "Coaching turned off",
        "unavailable": "Coaching not available",
        "idle": "Run `barista-log coach <id>` for tips",
        "analyzing": "Analyzing...",
        "discarded": "Extraction was deleted",
    }
    return error or messages.get(state, state)


def _resolve(items: list, reference: str) -> str:
    for item in items:
        if item.id == reference:
            return item.id
    matches = [item for item in items if item.name == reference]
    if not matches:
        raise ValidationError(f"Nothing named or identified by {reference!r}")
    return matches[0].id


if __name__ == "__main__":
    sys.exit(main())
