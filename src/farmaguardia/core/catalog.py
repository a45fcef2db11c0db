from __future__ import annotations

import json
import pkgutil
from dataclasses import dataclass
from functools import lru_cache
from importlib.resources import files as ir_files
from pathlib import Path
from typing import Dict, List, Tuple

from farmaguardia.core import timespan as TS
from farmaguardia.core.models import (
    RURAL_REGION_ID,
    ZBS,
    DutyLocation,
    Pharmacy,
    Region,
    RegionMetadata,
)
from farmaguardia.core.timespan import DutyTimeSpan

_CATALOG = "catalog.json"

_SPANS: Dict[str, DutyTimeSpan] = {
    "CAPITAL_DAY": TS.CAPITAL_DAY,
    "CAPITAL_NIGHT": TS.CAPITAL_NIGHT,
    "FULL_DAY": TS.FULL_DAY,
    "RURAL_DAYTIME": TS.RURAL_DAYTIME,
    "RURAL_EXTENDED_DAYTIME": TS.RURAL_EXTENDED_DAYTIME,
}


class CatalogError(LookupError):
    """Unknown region, zone or location id."""


@dataclass(frozen=True)
class RosterEntry:
    """A fixed pharmacy known by the text token the rosters print for it."""

    token: str
    name: str
    address: str
    phone: str
    span: DutyTimeSpan = TS.FULL_DAY

    def to_pharmacy(self) -> Pharmacy:
        return Pharmacy(self.name, self.address, self.phone)


def _read_catalog_bytes() -> bytes:
    try:
        return (ir_files("farmaguardia") / "config" / _CATALOG).read_bytes()
    except (FileNotFoundError, ModuleNotFoundError, OSError):
        pass

    try:
        data = pkgutil.get_data("farmaguardia", f"config/{_CATALOG}")
        if data:
            return data
    except OSError:
        pass

    guesses = [
        Path(__file__).parent.parent / "config" / _CATALOG,
        Path.cwd() / "src" / "farmaguardia" / "config" / _CATALOG,
    ]
    for g in guesses:
        if g.exists():
            return g.read_bytes()

    raise FileNotFoundError(
        f"{_CATALOG} not bundled. Ensure package-data includes config/*.json."
    )


@lru_cache(maxsize=1)
def _payload() -> dict:
    return json.loads(_read_catalog_bytes().decode("utf-8"))


def span_named(name: str) -> DutyTimeSpan:
    try:
        return _SPANS[name]
    except KeyError:
        raise CatalogError(f"Unknown duty span: {name}") from None


def _entry(token: str, raw: dict) -> RosterEntry:
    return RosterEntry(
        token=token,
        name=raw["name"],
        address=raw["address"],
        phone=raw["phone"],
        span=span_named(raw.get("span", "FULL_DAY")),
    )


@lru_cache(maxsize=1)
def regions() -> Tuple[Region, ...]:
    out = []
    for raw in _payload()["regions"]:
        meta = RegionMetadata(**raw.get("metadata", {}))
        out.append(Region(raw["id"], raw["name"], raw["icon"], raw["pdf_url"], meta))
    return tuple(out)


def region(region_id: str) -> Region:
    for r in regions():
        if r.id == region_id:
            return r
    raise CatalogError(f"Unknown region: {region_id}")


@lru_cache(maxsize=1)
def zbs_list() -> Tuple[ZBS, ...]:
    return tuple(ZBS(**raw) for raw in _payload()["zbs"])


def zbs(zbs_id: str) -> ZBS:
    for z in zbs_list():
        if z.id == zbs_id:
            return z
    raise CatalogError(f"Unknown ZBS: {zbs_id}")


def zone_location(zbs_id: str) -> DutyLocation:
    return DutyLocation.from_zbs(zbs(zbs_id), region(RURAL_REGION_ID))


def locations_for(region_id: str) -> List[DutyLocation]:
    parent = region(region_id)
    if parent.is_rural:
        return [DutyLocation.from_zbs(z, parent) for z in zbs_list()]
    return [DutyLocation.from_region(parent)]


def location(location_id: str) -> DutyLocation:
    for r in regions():
        for loc in locations_for(r.id):
            if loc.id == location_id:
                return loc
    raise CatalogError(f"Unknown duty location: {location_id}")


def rotation_roster(region_id: str) -> Dict[str, RosterEntry]:
    rosters = _payload()["rotation_rosters"]
    if region_id not in rosters:
        raise CatalogError(f"No rotation roster for region: {region_id}")
    return {token: _entry(token, raw) for token, raw in rosters[region_id].items()}


def rural_rosters() -> Dict[str, Dict[str, RosterEntry]]:
    return {
        zone: {token: _entry(token, raw) for token, raw in table.items()}
        for zone, table in _payload()["rural_rosters"].items()
    }


def la_granja_pharmacies() -> Tuple[RosterEntry, RosterEntry]:
    first, second = (_entry(raw["token"], raw) for raw in _payload()["la_granja"])
    return first, second


def cantalejo_pharmacies() -> List[RosterEntry]:
    return [_entry(raw["name"], raw) for raw in _payload()["cantalejo"]]
