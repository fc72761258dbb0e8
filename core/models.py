import math
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

MAINTENANCE_CHARGE = "HOUSING_COMPANY_MAINTENANCE_CHARGE"
FINANCING_CHARGE = "HOUSING_COMPANY_FINANCING_CHARGE"


def parse_number(text: str | None) -> Optional[float]:
    """Parse ``"12,5"`` or ``"12.5"`` into a float rounded to two decimals."""
    if text is None:
        return None
    try:
        value = float(str(text).strip().replace(",", "."))
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return round(value, 2)


def coerce_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return parse_number(str(value))
    if isinstance(value, str):
        return parse_number(value)
    return None


def coerce_int(value: Any) -> Optional[int]:
    number = coerce_number(value)
    if number is None:
        return None
    return int(number)


def coerce_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value or None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


@dataclass
class PeriodicCharge:
    periodic_charge: str
    price: Optional[float] = None
    charge_period: Optional[str] = None

    @classmethod
    def from_source(cls, data: dict) -> "PeriodicCharge":
        return cls(
            periodic_charge=coerce_text(data.get("periodicCharge")) or "",
            price=coerce_number(data.get("price")),
            charge_period=coerce_text(data.get("chargePeriod")),
        )


@dataclass
class ExtractedListingFields:
    """Listing fields as etuovi.com names them, before any normalization."""

    debf_free_price: Optional[float] = None
    selling_price: Optional[float] = None
    debt_share_amount: Optional[float] = None
    living_area: Optional[float] = None
    periodic_charges: list[PeriodicCharge] = field(default_factory=list)
    periodic_charges_additional_info: Optional[str] = None
    street_address: Optional[str] = None
    street_address_free_form: Optional[str] = None
    room_structure: Optional[str] = None
    building_year: Optional[int] = None
    residential_property_type: Optional[str] = None
    condition: Optional[str] = None
    energy_class: Optional[str] = None
    municipality: Optional[str] = None
    post_code: Optional[str] = None

    @property
    def has_price(self) -> bool:
        return bool(self.debf_free_price or self.selling_price)

    @classmethod
    def from_source(cls, data: dict) -> "ExtractedListingFields":
        """Build from an object of the page state. Key names are etuovi's own,
        including the ``debfFreePrice`` misspelling."""
        address = data.get("address")
        address = address if isinstance(address, dict) else {}
        location = data.get("location")
        location = location if isinstance(location, dict) else {}
        municipality = location.get("municipality")
        municipality = municipality if isinstance(municipality, dict) else {}

        charges = data.get("periodicCharges")
        if not isinstance(charges, list):
            charges = []

        return cls(
            debf_free_price=coerce_number(data.get("debfFreePrice")),
            selling_price=coerce_number(data.get("sellingPrice")),
            debt_share_amount=coerce_number(data.get("debtShareAmount")),
            living_area=coerce_number(data.get("livingArea")),
            periodic_charges=[
                PeriodicCharge.from_source(c) for c in charges if isinstance(c, dict)
            ],
            periodic_charges_additional_info=coerce_text(
                data.get("periodicChargesAdditionalInfo")
            ),
            street_address=coerce_text(address.get("streetAddress")),
            street_address_free_form=coerce_text(data.get("streetAddressFreeForm")),
            room_structure=coerce_text(data.get("roomStructure")),
            building_year=coerce_int(data.get("buildingYear")),
            residential_property_type=coerce_text(data.get("residentialPropertyType")),
            condition=coerce_text(data.get("condition")),
            energy_class=coerce_text(data.get("energyClass")),
            municipality=coerce_text(municipality.get("defaultName")),
            post_code=coerce_text(location.get("postCode")),
        )

    def find_charge(self, kind: str) -> Optional[PeriodicCharge]:
        return next((c for c in self.periodic_charges if c.periodic_charge == kind), None)


@dataclass(frozen=True)
class NormalizedPropertyData:
    url: str
    debt_free_price: float
    apartment_size: float
    maintenance_fee: float = 0.0
    debt_share: Optional[float] = None
    water_charge: Optional[float] = None
    financing_charge: Optional[float] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    building_year: Optional[int] = None
    property_type: Optional[str] = None
    condition: Optional[str] = None
    energy_class: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AddressInput:
    street: str
    city: Optional[str] = None
    postal_code: Optional[str] = None


@dataclass
class PropertyInput:
    """Property creation input in the shape the bookkeeping backend expects."""

    name: str
    external_source_id: str
    size: float
    status: str = "PROSPECT"
    external_source: str = "ETUOVI"
    build_year: Optional[int] = None
    apartment_type: Optional[str] = None
    address: Optional[AddressInput] = None

    def to_dict(self) -> dict:
        return asdict(self)
