"""Turn runs of roster text into :class:`Pharmacy` records.

Three input shapes are handled, all sharing :func:`extract_phone`:

* ``parse_triples`` takes ``(name, address, info)`` groups already split by a
  column reader that walked the page top-down.
* ``parse_batch`` takes a flat line list in groups of three ordered
  ``info, address, name`` (column readers that walk bottom-up).
* ``parse_single`` takes an arbitrary run of lines describing one pharmacy.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from farmaguardia.core.constants import PHARMACY_MARKER, PHONE_LABEL
from farmaguardia.core.models import Pharmacy

LOGGER = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"Tfno:\s*\d{3}\s*\d{6}")

Triple = Tuple[str, str, str]


def is_pharmacy_name(line: str) -> bool:
    return PHARMACY_MARKER in (line or "").upper()


def extract_phone(blob: str) -> Tuple[str, Optional[str]]:
    """Split an info blob into ``(phone, additional_info)``.

    The phone keeps its internal spacing. Whatever is left once the phone
    token is cut out becomes the additional info; blank leftovers are None.
    """
    text = blob or ""
    m = PHONE_PATTERN.search(text)
    if not m:
        rest = text.strip()
        return "", rest or None
    phone = m.group(0).replace(PHONE_LABEL, "", 1).strip()
    rest = (text[: m.start()] + " " + text[m.end() :]).strip()
    rest = re.sub(r"\s{2,}", " ", rest)
    return phone, rest or None


def parse_triples(triples: Iterable[Sequence[str]]) -> List[Pharmacy]:
    pharmacies: List[Pharmacy] = []
    for triple in triples:
        name, address, info = (list(triple) + ["", "", ""])[:3]
        phone, extra = extract_phone(info)
        pharmacies.append(Pharmacy(name.strip(), address.strip(), phone, extra))
    return pharmacies


def parse_batch(lines: Iterable[str]) -> List[Pharmacy]:
    cleaned = [line.strip() for line in lines if line and line.strip()]
    pharmacies: List[Pharmacy] = []
    for start in range(0, len(cleaned), 3):
        group = cleaned[start : start + 3]
        if len(group) < 3:
            LOGGER.debug("Dropping incomplete pharmacy group: %r", group)
            break
        info, address, name = group
        if not is_pharmacy_name(name):
            LOGGER.debug("Rejecting group without %s marker: %r", PHARMACY_MARKER, group)
            continue
        phone, extra = extract_phone(info)
        pharmacies.append(Pharmacy(name, address, phone, extra))
    return pharmacies


def parse_single(lines: Sequence[str]) -> Optional[Pharmacy]:
    cleaned = [line.strip() for line in lines if line and line.strip()]
    for idx, line in enumerate(cleaned):
        if not is_pharmacy_name(line):
            continue
        if idx + 1 >= len(cleaned):
            return None
        phone, extra = extract_phone(" ".join(cleaned[idx + 2 :]))
        return Pharmacy(line, cleaned[idx + 1], phone, extra)
    return None


def group_column_lines(lines: Iterable[str]) -> List[Triple]:
    """Group top-down column text into ``(name, address, info)`` triples.

    Every FARMACIA line opens a group. A group needs a name and an address;
    text before the first name and groups missing their address are dropped.
    """
    groups: List[List[str]] = []
    for raw in lines:
        line = (raw or "").strip()
        if not line:
            continue
        if is_pharmacy_name(line):
            groups.append([line])
        elif groups:
            groups[-1].append(line)
        else:
            LOGGER.debug("Skipping text above the first pharmacy: %r", line)

    triples: List[Triple] = []
    for group in groups:
        if len(group) < 2:
            LOGGER.debug("Discarding incoherent pharmacy group: %r", group)
            continue
        triples.append((group[0], group[1], " ".join(group[2:])))
    return triples
