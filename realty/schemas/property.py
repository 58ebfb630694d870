"""
Pydantic schemas for property requests and responses.
Handles property CRUD payloads, search criteria and paginated listings.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from realty.models.property import PropertyType, PropertyStatus
from realty.utils.search import PropertySearchFilters
import uuid


def _clean_text(value: Optional[str], field_name: str) -> Optional[str]:
    if value is None:
        return value
    if not value.strip():
        raise ValueError(f"{field_name} cannot be empty")
    return value.strip()


def _clean_facilities(value: Optional[List[str]]) -> Optional[List[str]]:
    """Strip tags and drop blanks and duplicates, keeping order."""
    if value is None:
        return value
    cleaned = []
    for tag in value:
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


class PropertyBase(BaseModel):
    """Base property schema with common fields."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Property listing name",
        examples=["Sunny Villa with Garden"]
    )

    type: PropertyType = Field(
        ...,
        description="Kind of dwelling",
        examples=["Villa"]
    )

    description: str = Field(
        ...,
        min_length=1,
        max_length=5000,
        description="Detailed property description",
        examples=["Four bedroom villa close to the beach with a private pool."]
    )

    address: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Property street address",
        examples=["12 Palm Road, Limassol"]
    )

    price: Decimal = Field(
        ...,
        ge=0,
        le=Decimal("999999999.99"),
        description="Property price in local currency",
        examples=[450000]
    )

    bedrooms: int = Field(0, ge=0, le=50, description="Number of bedrooms")

    bathrooms: int = Field(0, ge=0, le=50, description="Number of bathrooms")

    area: int = Field(
        ...,
        gt=0,
        le=1000000,
        description="Property area in square feet",
        examples=[2400]
    )

    facilities: List[str] = Field(
        default_factory=list,
        description="Facility tags, e.g. Wifi, Gym, Car Parking",
        examples=[["Wifi", "Swimming pool"]]
    )

    latitude: Optional[Decimal] = Field(None, ge=-90, le=90, examples=[34.6786])

    longitude: Optional[Decimal] = Field(None, ge=-180, le=180, examples=[33.0413])

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return _clean_text(v, "Name")

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return _clean_text(v, "Description")

    @field_validator('address')
    @classmethod
    def validate_address(cls, v):
        return _clean_text(v, "Address")

    @field_validator('facilities')
    @classmethod
    def validate_facilities(cls, v):
        return _clean_facilities(v)

    @model_validator(mode='after')
    def validate_coordinates(self):
        """Latitude and longitude are provided together or not at all."""
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("Both latitude and longitude must be provided together, or both must be None")
        return self


class PropertyCreate(PropertyBase):
    """Schema for creating a new property."""

    status: PropertyStatus = Field(
        PropertyStatus.AVAILABLE,
        description="Market status of the listing",
        examples=["Available"]
    )


class PropertyUpdate(BaseModel):
    """
    Schema for updating an existing property.
    Only the fields that are set are changed; status may be set to any value.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[PropertyType] = None
    status: Optional[PropertyStatus] = None
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, ge=0, le=Decimal("999999999.99"))
    bedrooms: Optional[int] = Field(None, ge=0, le=50)
    bathrooms: Optional[int] = Field(None, ge=0, le=50)
    area: Optional[int] = Field(None, gt=0, le=1000000)
    facilities: Optional[List[str]] = None
    latitude: Optional[Decimal] = Field(None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(None, ge=-180, le=180)

    @field_validator('name', 'description', 'address')
    @classmethod
    def validate_text(cls, v, info):
        return _clean_text(v, info.field_name.capitalize())

    @field_validator('facilities')
    @classmethod
    def validate_facilities(cls, v):
        return _clean_facilities(v)

    @model_validator(mode='after')
    def validate_coordinates(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("Both latitude and longitude must be provided together, or both must be None")
        return self


class PropertyResponse(BaseModel):
    """Schema for property response."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    type: PropertyType
    status: PropertyStatus
    description: str
    address: str
    price: float
    bedrooms: int
    bathrooms: int
    area: int
    facilities: List[str]
    images: List[str]
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    agent_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class PropertyListResponse(BaseModel):
    """Schema for paginated property list response."""

    properties: List[PropertyResponse]
    total: int = Field(..., description="Total number of properties matching the criteria", examples=[150])
    page: int = Field(..., examples=[1])
    page_size: int = Field(..., examples=[20])
    total_pages: int = Field(..., examples=[8])
    has_next: bool
    has_previous: bool


class PropertySearchParams(BaseModel):
    """Search criteria accepted by GET /properties."""

    query: Optional[str] = Field(
        None,
        max_length=255,
        description="Case-insensitive text matched against name, address and type"
    )
    min_price: Optional[Decimal] = Field(None, ge=0)
    max_price: Optional[Decimal] = Field(None, ge=0)
    property_type: Optional[PropertyType] = None
    status: Optional[PropertyStatus] = None
    facilities: Optional[List[str]] = Field(
        None,
        description="Listings must offer every facility given"
    )
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    radius_km: Optional[float] = Field(None, gt=0, le=20000)
    min_bedrooms: Optional[int] = Field(None, ge=0, le=50)
    agent_id: Optional[uuid.UUID] = None

    page: int = Field(1, ge=1, description="Page number (starts from 1)")
    page_size: int = Field(20, ge=1, le=100, description="Number of properties per page (max 100)")

    @field_validator('facilities')
    @classmethod
    def validate_facilities(cls, v):
        return _clean_facilities(v)

    def to_filters(self) -> PropertySearchFilters:
        return PropertySearchFilters(
            min_price=self.min_price,
            max_price=self.max_price,
            property_type=self.property_type,
            facilities=self.facilities,
            status=self.status,
            query=self.query,
            latitude=self.latitude,
            longitude=self.longitude,
            radius_km=self.radius_km,
            agent_id=self.agent_id,
            min_bedrooms=self.min_bedrooms
        )
