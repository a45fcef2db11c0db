from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from farmaguardia.core import catalog
from farmaguardia.core.models import PharmacySchedule
from farmaguardia.core.timeutil import now_local
from farmaguardia.export.json_writer import file_sha256, write_schedules
from farmaguardia.parsing.base import ScheduleMap
from farmaguardia.parsing.service import ParserSettings, ScheduleService
from farmaguardia.version import APP_VERSION

REGION_IDS = [r.id for r in catalog.regions()]


def _configure_logging(verbose: int) -> None:
    if verbose:
        level = logging.DEBUG if verbose > 1 else logging.INFO
    else:
        level = getattr(logging, os.environ.get("FARMAGUARDIA_LOG_LEVEL", "WARNING").upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _select(schedules: ScheduleMap, location_id: Optional[str]) -> ScheduleMap:
    if not location_id:
        return schedules
    return {loc: items for loc, items in schedules.items() if loc.id == location_id}


def _format_schedule(schedule: PharmacySchedule) -> List[str]:
    lines = [str(schedule.date)]
    for span, pharmacies in schedule.shifts.items():
        names = "; ".join(p.name for p in pharmacies) or "-"
        lines.append(f"  {span.shift_label} ({span.display_name}): {names}")
    return lines


def _cmd_regions(_: argparse.Namespace) -> None:
    print(f"farmaguardia {APP_VERSION}")
    for region in catalog.regions():
        print(f"{region.icon} {region.id}: {region.name}")
        if region.is_rural:
            for loc in catalog.locations_for(region.id):
                print(f"    {loc.icon} {loc.id}: {loc.name}")


def _cmd_parse(args: argparse.Namespace) -> None:
    service = ScheduleService(ParserSettings.from_env())
    schedules = _select(service.parse_pdf(args.region, args.pdf), args.location)
    if not schedules:
        print("No schedules found.")
        sys.exit(1)

    for location, items in schedules.items():
        print(f"{location.icon} {location.name}: {len(items)} days")
        if args.show:
            for schedule in items[: args.show]:
                print("\n".join(_format_schedule(schedule)))

    if args.json:
        meta = {
            "region": args.region,
            "source": Path(args.pdf).name,
            "sha256": file_sha256(args.pdf),
            "version": APP_VERSION,
        }
        print("JSON:", write_schedules(args.json, schedules, meta))


def _cmd_now(args: argparse.Namespace) -> None:
    service = ScheduleService(ParserSettings.from_env())
    schedules = _select(service.parse_pdf(args.region, args.pdf), args.location)
    when = datetime.fromisoformat(args.at) if args.at else now_local(service.settings.tz)
    found = False
    for location, items in schedules.items():
        on_duty = service.current_schedule(items, when)
        if on_duty is None:
            continue
        found = True
        schedule, span = on_duty
        print(f"{location.icon} {location.name} | {schedule.date} | {span.shift_label} {span.display_name}")
        for pharmacy in schedule.shifts.get(span, []):
            print(f"  {pharmacy.name}, {pharmacy.address} ({pharmacy.formatted_phone})")
    if not found:
        print("No pharmacy on duty found.")
        sys.exit(1)


def main(argv=None) -> None:
    ap = argparse.ArgumentParser(prog="farmaguardia")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    sp = ap.add_subparsers(dest="cmd")
    sp.add_parser("regions", help="List regions and rural health zones").set_defaults(func=_cmd_regions)

    p = sp.add_parser("parse", help="Parse a roster PDF")
    p.add_argument("--region", required=True, choices=REGION_IDS)
    p.add_argument("--pdf", required=True, help="Path to the roster PDF")
    p.add_argument("--location", required=False, help="Only this duty location id")
    p.add_argument("--json", required=False, help="Write schedules to this JSON path")
    p.add_argument("--show", type=int, default=0, help="Print the first N days per location")
    p.set_defaults(func=_cmd_parse)

    q = sp.add_parser("now", help="Show who is on duty at a given time")
    q.add_argument("--region", required=True, choices=REGION_IDS)
    q.add_argument("--pdf", required=True, help="Path to the roster PDF")
    q.add_argument("--location", required=False, help="Only this duty location id")
    q.add_argument("--at", required=False, help="ISO timestamp (default: now, Europe/Madrid)")
    q.set_defaults(func=_cmd_now)

    args = ap.parse_args(argv)
    if not hasattr(args, "func"):
        ap.print_help()
        return
    _configure_logging(args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
