import argparse
import asyncio
import json
import logging
import sys
from logging.handlers import RotatingFileHandler

from config import settings
from core.errors import EtuoviImportError, InvalidUrlError
from core.importer import etuovi_importer

log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

log = logging.getLogger(__name__)


def setup_logging() -> None:
    log_level = getattr(logging, settings.log_level.upper())
    logging.basicConfig(level=log_level, format=log_format)

    settings.log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        settings.log_dir / "etuovi-importer.log",
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(log_format))
    file_handler.setLevel(log_level)
    logging.getLogger().addHandler(file_handler)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Fetch property data from an etuovi.com listing")
    p.add_argument("url", help="Listing URL, e.g. https://www.etuovi.com/kohde/80481676")
    p.add_argument("--json", action="store_true", help="Print the result as JSON")
    p.add_argument(
        "--property-input",
        action="store_true",
        help="Print the property creation input instead of the listing data",
    )
    return p.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        data = await etuovi_importer.fetch_property_data(args.url)
    except InvalidUrlError as e:
        print(e.message, file=sys.stderr)
        return 2
    except EtuoviImportError as e:
        log.error(f"Import failed ({e.kind}): {e.message}")
        return 1

    result = (
        etuovi_importer.create_property_input(data).to_dict()
        if args.property_input
        else data.to_dict()
    )
    if args.json:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    else:
        for key, value in result.items():
            if value is not None:
                print(f"{key}: {value}")
    return 0


def run() -> None:
    setup_logging()
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
