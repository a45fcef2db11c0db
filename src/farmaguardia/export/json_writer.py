from __future__ import annotations

import json
from hashlib import sha256
from pathlib import Path
from typing import Dict, List

from farmaguardia.core.models import PharmacySchedule
from farmaguardia.parsing.base import ScheduleMap


def schedule_record(schedule: PharmacySchedule) -> Dict:
    d = schedule.date
    return {
        "date": {
            "day_of_week": d.day_of_week,
            "day": d.day,
            "month": d.month,
            "year": d.year,
        },
        "shifts": {
            span.to_key(): [p.to_dict() for p in pharmacies]
            for span, pharmacies in schedule.shifts.items()
        },
    }


def schedules_to_payload(schedules: ScheduleMap, meta: Dict) -> Dict:
    locations: Dict[str, List[Dict]] = {}
    for location, items in schedules.items():
        locations[location.id] = [schedule_record(s) for s in items]
    return {"meta": meta, "locations": locations}


def write_schedules(path: str, schedules: ScheduleMap, meta: Dict) -> str:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    blob = schedules_to_payload(schedules, meta)
    p.write_text(json.dumps(blob, indent=2, ensure_ascii=False), encoding="utf-8")
    return str(p)


def file_sha256(path: str) -> str:
    return sha256(Path(path).read_bytes()).hexdigest()
