"""
Router for unit conversion utilities.
"""

from fastapi import APIRouter

from ..schemas import (
    MeasurementDisplayRequest,
    MeasurementDisplayResponse,
    UnitConvertRequest,
    UnitConvertResponse,
)
from ..services.unit_conversion import (
    convert,
    convert_measurement,
    format_quantity_with_fractions,
    normalize_unit,
    preferred_measurement,
)

router = APIRouter()


@router.post("/convert", response_model=UnitConvertResponse)
def convert_units(req: UnitConvertRequest):
    """
    Convert a quantity from one unit to another.
    Cross-category or unknown units come back with convertible=false.
    """
    to_unit = normalize_unit(req.to_unit)
    result = convert(req.quantity, req.from_unit, req.to_unit)
    if result is None:
        return UnitConvertResponse(quantity=None, unit=to_unit, convertible=False)

    return UnitConvertResponse(
        quantity=result,
        unit=to_unit,
        display=format_quantity_with_fractions(result),
        convertible=True,
    )


@router.post("/display", response_model=MeasurementDisplayResponse)
def display_measurement(req: MeasurementDisplayRequest):
    """Render a measurement in the requested unit system."""
    converted = convert_measurement(req.quantity, req.unit)
    quantity, unit = preferred_measurement(converted, req.system)
    return MeasurementDisplayResponse(quantity=quantity, unit=unit, **converted.to_dict())
