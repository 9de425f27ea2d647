import logging
import os
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from pydantic import ValidationError

from .repository import RideRepository, create_repository
from .schemas import ErrorResponse, Pagination, Ride, RideValidationError, RidesEnvelope
from .utils import parse_int64

logger = logging.getLogger(__name__)

# --- Metrics ---
REQUEST_LATENCY = Histogram(
    "ride_request_latency_seconds",
    "Time spent processing ride API requests",
    ["endpoint"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.2, 0.5, 1.0]
)
RIDE_ERRORS = Counter(
    "ride_errors_total",
    "Total number of failed ride API requests",
    ["error_type"]
)
RIDES_CREATED = Counter(
    "rides_created_total",
    "Total number of rides stored"
)

# --- Configuration ---
DEFAULT_HOST = "0.0.0.0"

# Global registry for the store, filled in by lifespan
resources = {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Open the ride store and create its table on startup, release the pool on shutdown.
    """
    logger.info("🚀 Starting Ride API...")

    db_path = os.getenv("DB_PATH")
    if not db_path:
        logger.critical("❌ DB_PATH is not set")
        sys.exit(1)

    try:
        repository = create_repository(db_path)
    except Exception as e:
        logger.critical(f"❌ Failed to open connection to database: {e}")
        sys.exit(1)

    try:
        repository.init_table()
    except Exception as e:
        logger.critical(f"❌ Failed to initialize table: {e}")
        repository.dispose()
        sys.exit(1)

    resources["ride_repository"] = repository
    logger.info(f"✅ Ride store ready (db: {db_path})")

    yield

    logger.info("🛑 Shutting down Ride API...")
    repository.dispose()
    resources.clear()


app = FastAPI(title="Ride API", lifespan=lifespan)


def get_repository() -> RideRepository:
    repository = resources.get("ride_repository")
    if repository is None:
        RIDE_ERRORS.labels(error_type="initialization_error").inc()
        raise HTTPException(status_code=503, detail="Service not initialized properly")
    return repository


async def raw_body(request: Request) -> bytes:
    return await request.body()


def _store_failure(e: Exception) -> HTTPException:
    logger.exception("Ride store call failed")
    RIDE_ERRORS.labels(error_type="store_error").inc()
    return HTTPException(status_code=500, detail=f"Internal server error: {e}")


@app.get("/health", response_class=PlainTextResponse)
def health_check():
    return "Healthy"


@app.get("/metrics")
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.post(
    "/rides",
    status_code=201,
    response_model=Ride,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def create_ride(
    body: bytes = Depends(raw_body),
    repository: RideRepository = Depends(get_repository),
):
    """
    Store a new ride and echo it back with its assigned id.
    """
    with REQUEST_LATENCY.labels(endpoint="create_ride").time():
        try:
            ride = Ride.model_validate_json(body or b"{}")
        except ValidationError as e:
            RIDE_ERRORS.labels(error_type="malformed_body").inc()
            raise HTTPException(status_code=400, detail=f"Malformed request body: {e}")

        try:
            ride.check_valid()
        except RideValidationError as e:
            RIDE_ERRORS.labels(error_type="validation_error").inc()
            raise HTTPException(status_code=422, detail=f"Invalid request body: {e}")

        try:
            ride_id = repository.insert(ride)
        except Exception as e:
            raise _store_failure(e)

        RIDES_CREATED.inc()
        # A client-supplied id is ignored and replaced here
        ride.id = ride_id
        return ride


@app.get("/rides", response_model=RidesEnvelope, responses={400: {"model": ErrorResponse}})
def list_rides(request: Request, repository: RideRepository = Depends(get_repository)):
    """
    List rides newest first.

    Query params:
        - cursor (str): inclusive upper bound on id, taken from a previous response
        - limit (int): page size, 0 (the default) returns every ride
    """
    with REQUEST_LATENCY.labels(endpoint="list_rides").time():
        try:
            # First occurrence wins when a key repeats
            params = {
                key: request.query_params.getlist(key)[0]
                for key in ("cursor", "limit")
                if key in request.query_params
            }
            page = Pagination.model_validate(params)
        except ValidationError as e:
            RIDE_ERRORS.labels(error_type="bad_request").inc()
            raise HTTPException(status_code=400, detail=f"Bad request: {e}")

        # An unparseable cursor surfaces here as a 500 as well
        try:
            rides, cursor = repository.select_all(page)
        except Exception as e:
            raise _store_failure(e)

        return RidesEnvelope(rides=rides, cursor=cursor)


@app.get(
    "/rides/{ride_id}",
    response_model=Ride,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def get_ride(ride_id: str, repository: RideRepository = Depends(get_repository)):
    with REQUEST_LATENCY.labels(endpoint="get_ride").time():
        try:
            parsed_id = parse_int64(ride_id)
        except ValueError as e:
            RIDE_ERRORS.labels(error_type="invalid_id").inc()
            raise HTTPException(status_code=422, detail=f"Invalid ID: {e}")

        try:
            ride = repository.select_by_id(parsed_id)
        except Exception as e:
            raise _store_failure(e)

        if ride is None:
            RIDE_ERRORS.labels(error_type="not_found").inc()
            raise HTTPException(status_code=404, detail=f"Can't find ride with ID {ride_id}")
        return ride


def main():
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not os.getenv("DB_PATH"):
        logger.critical("❌ DB_PATH is not set")
        sys.exit(1)

    port = os.getenv("PORT")
    try:
        port_number = int(port)
    except (TypeError, ValueError):
        logger.critical(f"❌ PORT must be an integer, got {port!r}")
        sys.exit(1)

    uvicorn.run(app, host=os.getenv("HOST", DEFAULT_HOST), port=port_number)


if __name__ == "__main__":
    main()
