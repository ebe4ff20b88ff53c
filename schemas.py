# schemas.py
"""Data validation schemas for the world indicator dashboard."""

import pandera as pa
from pandera.typing import Series


class ObservationSchema(pa.DataFrameModel):
    """Schema for the long-format indicator observations."""
    CountryCode: Series[str] = pa.Field(nullable=False, str_length={"min_value": 3, "max_value": 3})
    IndicatorName: Series[str] = pa.Field(nullable=False)
    Year: Series[int] = pa.Field(nullable=False, ge=1900, le=2100)
    Value: Series[float] = pa.Field(nullable=True)

    class Config:
        coerce = True


class RegionMembershipSchema(pa.DataFrameModel):
    """Schema for the static country-to-region table."""
    country: Series[str] = pa.Field(nullable=False)
    alpha_3: Series[str] = pa.Field(nullable=False, str_length={"min_value": 3, "max_value": 3})
    region: Series[str] = pa.Field(nullable=False)


observation_schema = ObservationSchema
region_membership_schema = RegionMembershipSchema
