import pytest

from src.ride_api.main import resources
from src.ride_api.repository import create_repository
from src.ride_api.schemas import Ride


def make_ride(**overrides) -> Ride:
    fields = {
        "start_latitude": 90,
        "start_longitude": 180,
        "end_latitude": 90,
        "end_longitude": 180,
        "rider_name": "John Doe",
        "driver_name": "Driver",
        "driver_vehicle": "Car",
    }
    fields.update(overrides)
    return Ride(**fields)


@pytest.fixture
def repository(tmp_path):
    """Fresh SQLite file with the rides table created"""
    repo = create_repository(str(tmp_path / "rides.db"))
    repo.init_table()
    yield repo
    repo.dispose()


@pytest.fixture
def ride_store(repository):
    """Register the real repository the way lifespan would"""
    resources.clear()
    resources["ride_repository"] = repository
    yield repository
    resources.clear()


@pytest.fixture
def seeded_store(ride_store):
    """Store holding rides with ids 1, 2 and 3"""
    for i in range(3):
        ride_store.insert(make_ride(rider_name=f"Rider {i + 1}"))
    return ride_store
