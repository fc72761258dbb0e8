import logging
import re
from typing import Optional

from core.errors import StructureChangedError
from core.models import (
    FINANCING_CHARGE,
    MAINTENANCE_CHARGE,
    ExtractedListingFields,
    NormalizedPropertyData,
    parse_number,
)

log = logging.getLogger(__name__)

ADDRESS_SEPARATOR = " - "

WATER_CHARGE_RE = re.compile(r"[Vv]esimaksu[:\s]*(\d+(?:[,.]\d+)?)\s*€")

PROPERTY_TYPES = {
    "APARTMENT_HOUSE": "Kerrostalo",
    "ROW_HOUSE": "Rivitalo",
    "SEMI_DETACHED_HOUSE": "Paritalo",
    "DETACHED_HOUSE": "Omakotitalo",
    "CHAIN_HOUSE": "Ketjutalo",
    "HOLIDAY_HOME": "Loma-asunto",
}


def translate_property_type(code: str | None) -> Optional[str]:
    if not code:
        return None
    return PROPERTY_TYPES.get(code, code)


def parse_water_charge(info: str | None) -> Optional[float]:
    if not info:
        return None
    match = WATER_CHARGE_RE.search(info)
    return parse_number(match.group(1)) if match else None


def compose_address(fields: ExtractedListingFields) -> Optional[str]:
    """Join street and room layout, e.g. ``"Laihiantie 10 A 5 - 2h + k + kph"``."""
    parts = []
    street = fields.street_address_free_form or fields.street_address
    if street:
        parts.append(street)
    if fields.room_structure:
        parts.append(fields.room_structure)
    return ADDRESS_SEPARATOR.join(parts) if parts else None


def map_to_public(fields: ExtractedListingFields, url: str) -> NormalizedPropertyData:
    debt_free_price = fields.debf_free_price or fields.selling_price or 0
    apartment_size = fields.living_area or 0

    if not debt_free_price:
        log.error(f"No price found for {url}")
        raise StructureChangedError(
            "Could not extract price from listing. The page structure may have changed."
        )
    if not apartment_size:
        log.error(f"No apartment size found for {url}")
        raise StructureChangedError(
            "Could not extract apartment size from listing. The page structure may have changed."
        )

    maintenance = fields.find_charge(MAINTENANCE_CHARGE)
    financing = fields.find_charge(FINANCING_CHARGE)

    return NormalizedPropertyData(
        url=url,
        debt_free_price=debt_free_price,
        apartment_size=apartment_size,
        maintenance_fee=(maintenance.price or 0.0) if maintenance else 0.0,
        debt_share=fields.debt_share_amount or None,
        water_charge=parse_water_charge(fields.periodic_charges_additional_info),
        financing_charge=(financing.price or None) if financing else None,
        address=compose_address(fields),
        city=fields.municipality or None,
        postal_code=fields.post_code or None,
        building_year=fields.building_year or None,
        property_type=translate_property_type(fields.residential_property_type),
        condition=fields.condition or None,
        energy_class=fields.energy_class or None,
    )
