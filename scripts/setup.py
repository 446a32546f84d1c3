#!/usr/bin/env python3
"""Setup script for the booking hub API: migrate the schema and seed demo data."""

import asyncio
import logging
import sys
from decimal import Decimal
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from bookinghub.core.config import settings
from bookinghub.core.database import Database
from bookinghub.models import Landlord, Property

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_LANDLORDS = [
    {"full_name": "Margaret Hughes", "email": "margaret.hughes@example.com", "contact_number": "07700 900123"},
    {"full_name": "Owen Price", "email": "owen.price@example.com", "contact_number": "07700 900456"},
]

SAMPLE_PROPERTIES = [
    # (landlord index, name, type, address, postcode, city, daily price)
    (0, "Riverside House", "House", "12 Quay Street", "CF10 1EA", "Cardiff", Decimal("50.00")),
    (0, "Castle View Flat", "Apartment", "4 Castle Road", "CF10 2BE", "Cardiff", Decimal("42.50")),
    (1, "Harbour Cottage", "Cottage", "1 Harbour Row", "SA1 1AA", "Swansea", Decimal("65.00")),
]


def setup_database() -> None:
    """Apply all Alembic migrations."""
    logger.info("Setting up database...")

    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))

    logger.info("Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data() -> None:
    """Create landlords and properties to assign during local testing."""
    logger.info("Creating sample data...")

    database = Database(settings.database_url)

    try:
        async with database.session_factory() as db:
            existing = await db.execute(select(func.count()).select_from(Property))
            if existing.scalar_one() > 0:
                logger.info("Sample data already exists, skipping...")
                return

            landlords = [Landlord(**data) for data in SAMPLE_LANDLORDS]
            db.add_all(landlords)
            await db.flush()

            for landlord_index, name, kind, address, postcode, city, price in SAMPLE_PROPERTIES:
                db.add(Property(
                    landlord_id=landlords[landlord_index].id,
                    property_name=name,
                    property_type=kind,
                    full_address=address,
                    postcode=postcode,
                    city=city,
                    price=price,
                    is_available=True
                ))

            await db.commit()
            logger.info(f"Created {len(landlords)} landlords and {len(SAMPLE_PROPERTIES)} properties")
    finally:
        await database.dispose()


def main() -> None:
    """Main setup function."""
    logger.info("Starting booking hub API setup...")

    # Migrations run their own event loop
    setup_database()

    asyncio.run(create_sample_data())

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn bookinghub.main:app --reload")


if __name__ == "__main__":
    main()
