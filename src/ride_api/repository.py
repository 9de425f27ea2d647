"""
Ride Store
==========

Persistence for rides over a local SQLite file, using SQLAlchemy Core.

Column names in the table (startLat, startLong, ...) differ from the JSON
names on the wire (startLatitude, startLongitude, ...); the mapping lives in
_row_to_ride and _ride_values.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import (
    Column,
    Integer,
    MetaData,
    REAL,
    Table,
    Text,
    create_engine,
    select,
)
from sqlalchemy.engine import Engine

from .schemas import Pagination, Ride
from .utils import parse_int64

logger = logging.getLogger(__name__)

metadata = MetaData()

rides = Table(
    "rides",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("startLat", REAL, nullable=False),
    Column("startLong", REAL, nullable=False),
    Column("endLat", REAL, nullable=False),
    Column("endLong", REAL, nullable=False),
    Column("riderName", Text, nullable=False),
    Column("driverName", Text, nullable=False),
    Column("driverVehicle", Text, nullable=False),
    sqlite_autoincrement=True,
)


def _row_to_ride(row) -> Ride:
    return Ride(
        id=row.id,
        start_latitude=row.startLat,
        start_longitude=row.startLong,
        end_latitude=row.endLat,
        end_longitude=row.endLong,
        rider_name=row.riderName,
        driver_name=row.driverName,
        driver_vehicle=row.driverVehicle,
    )


def _ride_values(ride: Ride) -> dict:
    return {
        "startLat": ride.start_latitude,
        "startLong": ride.start_longitude,
        "endLat": ride.end_latitude,
        "endLong": ride.end_longitude,
        "riderName": ride.rider_name,
        "driverName": ride.driver_name,
        "driverVehicle": ride.driver_vehicle,
    }


class RideRepository:
    """
    CRUD over the `rides` table.

    Driver errors are not caught or wrapped here; callers decide how to
    report them.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def init_table(self) -> None:
        # NOTE: CREATE TABLE IF NOT EXISTS; there are no migrations beyond this.
        metadata.create_all(self.engine, tables=[rides])

    def insert(self, ride: Ride) -> int:
        """Insert the ride (its id is ignored) and return the id the database assigned."""
        with self.engine.begin() as conn:
            result = conn.execute(rides.insert().values(**_ride_values(ride)))
            return result.inserted_primary_key[0]

    def select_all(self, page: Pagination) -> Tuple[List[Ride], str]:
        """
        List rides newest first using keyset pagination.

        Args:
            page: cursor is an inclusive upper bound on id ("" starts from the
                newest ride); limit caps the page size (0 returns everything)

        Returns:
            (rides, next_cursor) where next_cursor is "" when there is no
            further page

        Raises:
            ValueError: if the cursor is not a valid 64-bit integer
        """
        query = select(rides).order_by(rides.c.id.desc())

        if page.cursor != "":
            cursor = parse_int64(page.cursor)
            query = query.where(rides.c.id <= cursor)

        if page.limit > 0:
            # One extra row so the next cursor can be read off it. It must
            # not be returned.
            query = query.limit(page.limit + 1)

        with self.engine.connect() as conn:
            result = [_row_to_ride(row) for row in conn.execute(query)]

        if page.limit == 0 or len(result) <= page.limit:
            return result, ""

        next_cursor = str(result[page.limit].id)
        return result[:page.limit], next_cursor

    def select_by_id(self, ride_id: int) -> Optional[Ride]:
        """Fetch one ride, or None if no row has this id."""
        query = select(rides).where(rides.c.id == ride_id)
        with self.engine.connect() as conn:
            row = conn.execute(query).first()
        if row is None:
            return None
        return _row_to_ride(row)

    def dispose(self) -> None:
        self.engine.dispose()


def create_repository(db_path: str) -> RideRepository:
    """Open (or create) the SQLite file at db_path behind a pooled engine."""
    engine = create_engine(f"sqlite:///{db_path}")
    logger.info("Opened SQLite database at %s", db_path)
    return RideRepository(engine)
