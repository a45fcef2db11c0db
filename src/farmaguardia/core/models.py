from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from farmaguardia.core.dutydate import DutyDate
from farmaguardia.core.timespan import (
    CAPITAL_DAY,
    CAPITAL_NIGHT,
    FULL_DAY,
    DutyTimeSpan,
)

RURAL_REGION_ID = "segovia-rural"


@dataclass(frozen=True)
class Pharmacy:
    name: str
    address: str
    phone: str
    additional_info: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()), compare=False)

    @property
    def formatted_phone(self) -> str:
        digits = re.sub(r"\D", "", self.phone or "")
        if len(digits) != 9:
            return self.phone
        return " ".join(digits[i : i + 3] for i in range(0, 9, 3))

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "additional_info": self.additional_info,
        }


ShiftMap = Dict[DutyTimeSpan, List[Pharmacy]]


@dataclass
class PharmacySchedule:
    date: DutyDate
    shifts: ShiftMap = field(default_factory=dict)

    @classmethod
    def day_night(
        cls, date: DutyDate, day: List[Pharmacy], night: List[Pharmacy]
    ) -> "PharmacySchedule":
        return cls(date, {CAPITAL_DAY: list(day), CAPITAL_NIGHT: list(night)})

    @property
    def day_shift_pharmacies(self) -> List[Pharmacy]:
        if CAPITAL_DAY in self.shifts:
            return self.shifts[CAPITAL_DAY]
        return self.shifts.get(FULL_DAY, [])

    @property
    def night_shift_pharmacies(self) -> List[Pharmacy]:
        if CAPITAL_NIGHT in self.shifts:
            return self.shifts[CAPITAL_NIGHT]
        return self.shifts.get(FULL_DAY, [])

    @property
    def is_empty(self) -> bool:
        return not any(self.shifts.values())


@dataclass(frozen=True)
class RegionMetadata:
    has_24h_pharmacies: bool = False
    is_monthly_schedule: bool = False
    notes: Optional[str] = None


@dataclass(frozen=True)
class Region:
    id: str
    name: str
    icon: str
    pdf_url: str
    metadata: RegionMetadata = field(default_factory=RegionMetadata, compare=False)

    @property
    def is_rural(self) -> bool:
        return self.id == RURAL_REGION_ID


@dataclass(frozen=True)
class ZBS:
    id: str
    name: str
    icon: str
    notes: Optional[str] = None


@dataclass(frozen=True, eq=False)
class DutyLocation:
    """Key of a schedule map: a whole region or one rural health zone.

    Two locations are the same location when their ids match, whatever
    else they carry.
    """

    id: str
    name: str
    icon: str
    notes: Optional[str]
    region_id: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DutyLocation):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @classmethod
    def from_region(cls, region: Region) -> "DutyLocation":
        return cls(region.id, region.name, region.icon, region.metadata.notes, region.id)

    @classmethod
    def from_zbs(cls, zbs: ZBS, region: Region) -> "DutyLocation":
        return cls(zbs.id, zbs.name, zbs.icon, zbs.notes, region.id)
