"""Campus lookup tools backed by the static reference tables."""
from typing import Any, Dict

from pydantic import Field, StrictStr

from campus_data import ReferenceData
from validation import FlowModel

from .registry import NotFound, ToolRegistry

GET_LOCATION_INFO = "getLocationInfo"


class LocationRecord(FlowModel):
    """A campus location record."""

    name: StrictStr
    type: StrictStr
    description: StrictStr
    hours: StrictStr


class LocationQuery(FlowModel):
    locationName: StrictStr = Field(
        min_length=1,
        description='The name of the location to get information for. e.g. "Main Library", "Student Union"',
    )


def make_location_lookup(data: ReferenceData):
    """Build the ``getLocationInfo`` handler over ``data``."""

    def _lookup(args: Dict[str, Any]) -> Any:
        location = data.find_location(args["locationName"])
        if location is None:
            return NotFound(
                f'Information for "{args["locationName"]}" could not be found. '
                f"Available locations are: {', '.join(data.location_names())}"
            )
        return location.to_payload()

    return _lookup


def register_campus_tools(registry: ToolRegistry, data: ReferenceData) -> ToolRegistry:
    registry.register(
        name=GET_LOCATION_INFO,
        description="Get information about a specific location on campus, like its hours or purpose.",
        input_schema=LocationQuery,
        output_schema=LocationRecord,
        handler=make_location_lookup(data),
    )
    return registry


def build_tool_registry(data: ReferenceData) -> ToolRegistry:
    """Create the process-wide tool registry."""
    return register_campus_tools(ToolRegistry(), data)
