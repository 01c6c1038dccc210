"""Pydantic schemas for API request/response validation.

Wire names are camelCase (``fullName``, ``propertyType``); Python attributes
stay snake_case and match the ORM columns, so ``model_dump()`` output can be
handed to a repository as-is.
"""

import re
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveInt,
    field_validator,
)
from pydantic.alias_generators import to_camel

from models import (
    MAX_ID,
    ClientSource,
    ClientStatus,
    FileCategory,
    PropertyStatus,
    PropertyType,
    UserRole,
)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MAX_PAGE_LIMIT = 100
MAX_PAGE = 2**31 - 1

# Foreign key filter value; anything past the key range fails the filter schema
IdFilter = Annotated[int, Field(ge=1, le=MAX_ID)]


def _check_email(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip().lower()
    if not _EMAIL_RE.match(v):
        raise ValueError("Invalid email address")
    return v


def _reject_null(v: object) -> object:
    if v is None:
        raise ValueError("Field cannot be null")
    return v


class CamelModel(BaseModel):
    """Accepts and emits camelCase; snake_case input is accepted too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ResponseModel(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# Pagination
# =============================================================================


class PaginationParams(BaseModel):
    """?page=&limit= query parameters."""

    page: int = Field(default=1, ge=1, le=MAX_PAGE)
    limit: int = Field(default=10, ge=1, le=MAX_PAGE_LIMIT)


class PaginationMeta(CamelModel):
    """Rendered as meta.pagination on list responses."""

    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool


# =============================================================================
# Properties
# =============================================================================


class PropertyCreate(CamelModel):
    title: str = Field(min_length=3, max_length=255)
    description: str | None = None
    address: str = Field(min_length=5)
    city: str = Field(min_length=2, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)
    country: str = Field(default="España", max_length=100)
    property_type: PropertyType
    status: PropertyStatus = PropertyStatus.AVAILABLE
    # Accepts 250000, 250000.5 or "250000.505"; stored rounded to cents
    price: Decimal = Field(ge=0, max_digits=14)
    surface_area: PositiveInt | None = None
    bedrooms: NonNegativeInt | None = None
    bathrooms: NonNegativeInt | None = None
    garage: bool = False
    garden: bool = False
    owner_id: PositiveInt | None = None
    agent_id: PositiveInt | None = None


class PropertyUpdate(CamelModel):
    """Merge-patch: only fields present in the body are written."""

    title: str | None = Field(default=None, min_length=3, max_length=255)
    description: str | None = None
    address: str | None = Field(default=None, min_length=5)
    city: str | None = Field(default=None, min_length=2, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)
    country: str | None = Field(default=None, max_length=100)
    property_type: PropertyType | None = None
    status: PropertyStatus | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=14)
    surface_area: PositiveInt | None = None
    bedrooms: NonNegativeInt | None = None
    bathrooms: NonNegativeInt | None = None
    garage: bool | None = None
    garden: bool | None = None
    owner_id: PositiveInt | None = None
    agent_id: PositiveInt | None = None

    _not_null = field_validator(
        "title",
        "address",
        "city",
        "country",
        "property_type",
        "status",
        "price",
        "garage",
        "garden",
        mode="before",
    )(_reject_null)


class PropertyFilters(CamelModel):
    # Numeric filters stay raw; process_property_filters coerces them one by one
    city: str | None = None
    property_type: PropertyType | None = None
    status: PropertyStatus | None = None
    min_price: str | None = None
    max_price: str | None = None
    min_bedrooms: str | None = None
    max_bedrooms: str | None = None
    min_surface: str | None = None
    owner_id: str | None = None
    agent_id: str | None = None


class PropertyResponse(ResponseModel):
    id: int
    title: str
    description: str | None = None
    address: str
    city: str
    postal_code: str | None = None
    country: str | None = None
    property_type: PropertyType
    status: PropertyStatus
    price: Decimal
    surface_area: int | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    garage: bool | None = None
    garden: bool | None = None
    owner_id: int | None = None
    agent_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


# =============================================================================
# Clients
# =============================================================================


class ClientCreate(CamelModel):
    full_name: str = Field(min_length=2, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = None
    notes: str | None = None
    agent_id: PositiveInt | None = None
    status: ClientStatus = ClientStatus.LEAD
    source: ClientSource = ClientSource.OTHER

    _email = field_validator("email")(_check_email)


class ClientUpdate(CamelModel):
    full_name: str | None = Field(default=None, min_length=2, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = None
    notes: str | None = None
    agent_id: PositiveInt | None = None
    status: ClientStatus | None = None
    source: ClientSource | None = None

    _email = field_validator("email")(_check_email)
    _not_null = field_validator("full_name", "status", "source", mode="before")(
        _reject_null
    )


class ClientFilters(CamelModel):
    full_name: str | None = None
    email: str | None = None
    agent_id: IdFilter | None = None
    status: ClientStatus | None = None


class ClientResponse(ResponseModel):
    id: int
    full_name: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    notes: str | None = None
    agent_id: int | None = None
    status: ClientStatus | None = None
    source: ClientSource | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


# =============================================================================
# Documents
# =============================================================================


class DocumentCreate(CamelModel):
    filename: str = Field(min_length=1, max_length=255)
    original_filename: str = Field(min_length=1, max_length=255)
    file_path: str = Field(min_length=1)
    file_size: PositiveInt
    mime_type: str = Field(min_length=1, max_length=100)
    category: FileCategory = FileCategory.OTHER
    property_id: PositiveInt | None = None
    client_id: PositiveInt | None = None
    access_token: str | None = Field(default=None, max_length=255)
    expires_at: datetime | None = None
    is_public: bool = False
    uploaded_by: PositiveInt


class DocumentUpdate(CamelModel):
    category: FileCategory | None = None
    access_token: str | None = Field(default=None, max_length=255)
    expires_at: datetime | None = None
    is_public: bool | None = None

    _not_null = field_validator("category", "is_public", mode="before")(
        _reject_null
    )


class DocumentFilters(CamelModel):
    category: FileCategory | None = None
    property_id: IdFilter | None = None
    client_id: IdFilter | None = None
    uploaded_by: IdFilter | None = None
    is_public: bool | None = None


class DocumentResponse(ResponseModel):
    id: int
    filename: str
    original_filename: str
    file_path: str
    file_size: int
    mime_type: str
    category: FileCategory
    property_id: int | None = None
    client_id: int | None = None
    access_token: str | None = None
    expires_at: datetime | None = None
    download_count: int | None = None
    is_public: bool | None = None
    uploaded_by: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


# =============================================================================
# Users
# =============================================================================


class UserCreate(CamelModel):
    email: str = Field(max_length=255)
    password: str = Field(min_length=8, max_length=100)
    role: UserRole = UserRole.CLIENT
    full_name: str = Field(min_length=2, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    avatar_url: str | None = None

    _email = field_validator("email")(_check_email)

    @field_validator("avatar_url")
    @classmethod
    def validate_avatar_url(cls, v: str | None) -> str | None:
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError("Avatar URL must be an http(s) URL")
        return v


class UserUpdate(CamelModel):
    email: str | None = Field(default=None, max_length=255)
    password: str | None = Field(default=None, min_length=8, max_length=100)
    role: UserRole | None = None
    full_name: str | None = Field(default=None, min_length=2, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    avatar_url: str | None = None

    _email = field_validator("email")(_check_email)
    _not_null = field_validator(
        "email", "password", "role", "full_name", mode="before"
    )(_reject_null)

    @field_validator("avatar_url")
    @classmethod
    def validate_avatar_url(cls, v: str | None) -> str | None:
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError("Avatar URL must be an http(s) URL")
        return v


class UserFilters(CamelModel):
    search: str | None = None
    email: str | None = None
    role: UserRole | None = None
    full_name: str | None = None


class UserResponse(ResponseModel):
    """Never carries the password hash."""

    id: int
    email: str
    role: UserRole
    full_name: str
    phone: str | None = None
    avatar_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


# =============================================================================
# Health
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
