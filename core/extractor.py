"""Recover listing fields from an etuovi.com listing page.

Three tiers are tried in order and each one reports its outcome as a plain
return value:

1. the ``__INITIAL_STATE__`` JSON blob the page assigns in a ``<script>`` tag,
2. a depth-bounded search of that blob for the object holding the listing,
3. one regular expression per field run against the raw page text.

Key names below are etuovi's own. ``debfFreePrice`` is misspelled upstream and
must stay that way for the patterns to match real pages.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from core.models import MAINTENANCE_CHARGE, ExtractedListingFields, parse_number

log = logging.getLogger(__name__)

MAX_SEARCH_DEPTH = 10

INITIAL_STATE_RE = re.compile(
    r"__INITIAL_STATE__\s*=\s*(\{.*?\});?\s*(?:</script>|window\.|$)", re.S
)

_NUMBER = r"(\d+(?:\.\d+)?)"
_STRING = r'"((?:[^"\\]|\\.)+)"'

NUMBER_PATTERNS = {
    "debfFreePrice": re.compile(r'"debfFreePrice":' + _NUMBER),
    "sellingPrice": re.compile(r'"sellingPrice":' + _NUMBER),
    "livingArea": re.compile(r'"livingArea":' + _NUMBER),
    "debtShareAmount": re.compile(r'"debtShareAmount":' + _NUMBER),
}

TEXT_PATTERNS = {
    "periodicChargesAdditionalInfo": re.compile(r'"periodicChargesAdditionalInfo":' + _STRING),
    "residentialPropertyType": re.compile(r'"residentialPropertyType":' + _STRING),
    "streetAddressFreeForm": re.compile(r'"streetAddressFreeForm":' + _STRING),
    "roomStructure": re.compile(r'"roomStructure":' + _STRING),
    "condition": re.compile(r'"condition":' + _STRING),
    "energyClass": re.compile(r'"energyClass":' + _STRING),
}

BUILDING_YEAR_RE = re.compile(r'"buildingYear":(\d{4})(?!\d)')
PERIODIC_CHARGES_RE = re.compile(r'"periodicCharges":\[([^\]]+)\]')
MAINTENANCE_CHARGE_RE = re.compile(
    r'"periodicCharge":"' + MAINTENANCE_CHARGE + r'","price":' + _NUMBER
)
MUNICIPALITY_RE = re.compile(r'"municipality":\{[^}]*"defaultName":' + _STRING)
POST_CODE_RE = re.compile(r'"postCode":"(\d+)"')

UNICODE_ESCAPE_RE = re.compile(r"\\u([0-9A-Fa-f]{4})")


@dataclass
class ExtractionResult:
    fields: Optional[ExtractedListingFields]
    method: str

    @property
    def ok(self) -> bool:
        return self.fields is not None


def unescape(text: str) -> str:
    """Decode ``\\u002F`` style escapes left in strings lifted from inline JSON."""
    try:
        return json.loads(f'"{text}"')
    except json.JSONDecodeError:
        pass
    text = UNICODE_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 16)), text)
    return text.replace("\\/", "/").replace('\\"', '"')


def parse_initial_state(html: str) -> Any:
    match = INITIAL_STATE_RE.search(html)
    if not match:
        return None
    try:
        return json.loads(match.group(1))
    except json.JSONDecodeError as e:
        log.debug(f"__INITIAL_STATE__ is not valid JSON: {e}")
        return None


def _looks_like_listing(obj: dict) -> bool:
    return ("debfFreePrice" in obj or "sellingPrice" in obj) and "livingArea" in obj


def find_property_data(state: Any, max_depth: int = MAX_SEARCH_DEPTH) -> Optional[dict]:
    """Return the first object (pre-order) carrying a price key and ``livingArea``.

    Nodes deeper than ``max_depth`` are never visited.
    """
    stack: list[tuple[Any, int]] = [(state, 0)]
    while stack:
        node, depth = stack.pop()
        if depth > max_depth:
            continue
        if isinstance(node, dict):
            if _looks_like_listing(node):
                return node
            children = list(node.values())
        elif isinstance(node, list):
            children = node
        else:
            continue
        stack.extend(
            (child, depth + 1)
            for child in reversed(children)
            if isinstance(child, (dict, list))
        )
    return None


def _extract_charges(html: str) -> Optional[list]:
    match = PERIODIC_CHARGES_RE.search(html)
    if match:
        try:
            charges = json.loads(f"[{match.group(1)}]")
        except json.JSONDecodeError:
            charges = None
        if isinstance(charges, list):
            return charges

    # Only the maintenance charge is load-bearing, look for that entry alone
    maintenance = MAINTENANCE_CHARGE_RE.search(html)
    if maintenance:
        return [
            {
                "periodicCharge": MAINTENANCE_CHARGE,
                "price": parse_number(maintenance.group(1)),
                "chargePeriod": "MONTH",
            }
        ]
    return None


def extract_from_text(html: str) -> Optional[ExtractedListingFields]:
    data: dict[str, Any] = {}

    for key, pattern in NUMBER_PATTERNS.items():
        if key == "sellingPrice" and data.get("debfFreePrice"):
            continue
        match = pattern.search(html)
        if match:
            value = parse_number(match.group(1))
            if value is not None:
                data[key] = value

    for key, pattern in TEXT_PATTERNS.items():
        match = pattern.search(html)
        if match:
            data[key] = unescape(match.group(1))

    charges = _extract_charges(html)
    if charges is not None:
        data["periodicCharges"] = charges

    year = BUILDING_YEAR_RE.search(html)
    if year:
        data["buildingYear"] = int(year.group(1))

    location: dict[str, Any] = {}
    municipality = MUNICIPALITY_RE.search(html)
    if municipality:
        location["municipality"] = {"defaultName": unescape(municipality.group(1))}
    post_code = POST_CODE_RE.search(html)
    if post_code:
        location["postCode"] = post_code.group(1)
    if location:
        data["location"] = location

    fields = ExtractedListingFields.from_source(data)
    if not fields.has_price:
        return None
    return fields


def extract(html: str) -> ExtractionResult:
    state = parse_initial_state(html)
    if state is not None:
        found = find_property_data(state)
        if found is not None:
            fields = ExtractedListingFields.from_source(found)
            if fields.has_price:
                log.debug("Listing data found in __INITIAL_STATE__")
                return ExtractionResult(fields, "initial_state")
        log.info("No usable listing object in __INITIAL_STATE__, falling back to text search")

    fields = extract_from_text(html)
    if fields is not None:
        log.debug("Listing data extracted from page text")
        return ExtractionResult(fields, "text")

    return ExtractionResult(None, "none")
