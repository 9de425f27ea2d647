from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List

from .utils import INT64_MAX


class RideValidationError(ValueError):
    """Raised when a decoded ride breaks one or more domain rules."""

    def __init__(self, violations: List[str]):
        self.violations = violations
        super().__init__("; ".join(violations))


class Ride(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        allow_inf_nan=False,
    )

    id: int = Field(0, description="Assigned by the store on insert")
    start_latitude: float = Field(0.0, description="Latitude of the pickup point")
    start_longitude: float = Field(0.0, description="Longitude of the pickup point")
    end_latitude: float = Field(0.0, description="Latitude of the drop-off point")
    end_longitude: float = Field(0.0, description="Longitude of the drop-off point")
    rider_name: str = Field("", description="Name of the rider")
    driver_name: str = Field("", description="Name of the driver")
    driver_vehicle: str = Field("", description="Vehicle description")

    def violations(self) -> List[str]:
        """Every rule this ride breaks, latitudes first, then longitudes, then names."""
        errs = []
        for lat in (self.start_latitude, self.end_latitude):
            if not -90 <= lat <= 90:
                errs.append(f"{lat:f} is not a valid latitude value")
        for lng in (self.start_longitude, self.end_longitude):
            if not -180 <= lng <= 180:
                errs.append(f"{lng:f} is not a valid longitude value")
        for key, value in (
            ("riderName", self.rider_name),
            ("driverName", self.driver_name),
            ("driverVehicle", self.driver_vehicle),
        ):
            if value == "":
                errs.append(f"{key} can't be empty")
        return errs

    def check_valid(self) -> None:
        errs = self.violations()
        if errs:
            raise RideValidationError(errs)


class Pagination(BaseModel):
    cursor: str = Field("", description="Inclusive upper bound on ride id, empty for newest")
    limit: int = Field(0, ge=0, le=INT64_MAX - 1, description="Maximum rides per page, 0 disables paging")


class RidesEnvelope(BaseModel):
    rides: List[Ride]
    cursor: str = ""


class ErrorResponse(BaseModel):
    detail: str
