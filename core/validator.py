import re

from core.errors import InvalidUrlError

ETUOVI_LISTING_RE = re.compile(r"^https?://(www\.)?etuovi\.com/kohde/")
LISTING_ID_RE = re.compile(r"/kohde/(\d+)")


def validate_url(url: str) -> None:
    """Raise InvalidUrlError unless ``url`` points at an etuovi.com listing."""
    if not isinstance(url, str) or not ETUOVI_LISTING_RE.match(url):
        raise InvalidUrlError()


def extract_listing_id(url: str) -> str:
    match = LISTING_ID_RE.search(url)
    return match.group(1) if match else url
