import logging
from typing import Awaitable, Callable, TypeVar

from core.errors import StructureChangedError
from core.extractor import extract
from core.fetcher import ListingFetcher
from core.mapper import ADDRESS_SEPARATOR, map_to_public
from core.models import AddressInput, NormalizedPropertyData, PropertyInput
from core.validator import extract_listing_id, validate_url

log = logging.getLogger(__name__)

T = TypeVar("T")


class EtuoviImporter:
    def __init__(self, fetcher: ListingFetcher | None = None):
        self.fetcher = fetcher or ListingFetcher()

    def validate_url(self, url: str) -> None:
        validate_url(url)

    async def fetch_property_data(self, url: str) -> NormalizedPropertyData:
        self.validate_url(url)
        log.info(f"Importing etuovi listing {url}")
        html = await self.fetcher.fetch(url)
        return self.parse_html(url, html)

    def parse_html(self, url: str, html: str) -> NormalizedPropertyData:
        result = extract(html)
        if not result.ok:
            log.error(f"No listing data found in {url}, page layout may have changed")
            raise StructureChangedError()

        log.info(f"Extracted {url} using {result.method}")
        return map_to_public(result.fields, url)

    def create_property_input(self, data: NormalizedPropertyData) -> PropertyInput:
        listing_id = extract_listing_id(data.url)
        return PropertyInput(
            name=data.address or f"Etuovi {listing_id}",
            external_source_id=listing_id,
            size=data.apartment_size,
            build_year=data.building_year,
            apartment_type=data.property_type,
            address=self._address_input(data),
        )

    def _address_input(self, data: NormalizedPropertyData) -> AddressInput | None:
        if not data.address:
            return None
        # "Street 1 A 5 - 2h + k + kph": the street is everything before the separator
        index = data.address.find(ADDRESS_SEPARATOR)
        street = data.address[:index] if index > 0 else data.address
        return AddressInput(street=street, city=data.city, postal_code=data.postal_code)

    async def create_prospect_property(
        self,
        url: str,
        add_property: Callable[[PropertyInput], Awaitable[T]],
    ) -> T:
        data = await self.fetch_property_data(url)
        return await add_property(self.create_property_input(data))


etuovi_importer = EtuoviImporter()
