"""SQLAlchemy models for the Estate API resources."""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.types import TypeDecorator

from core.database import Base

# Primary and foreign keys are 32-bit INTEGER columns
MAX_ID = 2**31 - 1


def utcnow() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime that always reads back as UTC.

    SQLite drops tzinfo on storage, so naive values coming back are
    re-tagged as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value


def _enum_column(enum_cls: type[PyEnum], name: str) -> Enum:
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        values_callable=lambda x: [e.value for e in x],
    )


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamp columns.

    updated_at has no onupdate hook: the repository refreshes it on every
    update, and a soft delete must only touch deleted_at.
    """

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(UTCDateTime(), default=utcnow)

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(UTCDateTime(), default=utcnow)


class SoftDeleteMixin:
    """Rows with a deleted_at value are invisible to every repository read."""

    @declared_attr
    def deleted_at(cls) -> Mapped[datetime | None]:
        return mapped_column(UTCDateTime(), nullable=True, index=True)


class UserRole(str, PyEnum):
    ADMIN = "admin"
    AGENT = "agent"
    CLIENT = "client"


class User(TimestampMixin, SoftDeleteMixin, Base):
    """Back-office and client-portal accounts."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True
    )
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        _enum_column(UserRole, "user_role"), default=UserRole.CLIENT, nullable=False
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)


class PropertyType(str, PyEnum):
    HOUSE = "house"
    APARTMENT = "apartment"
    OFFICE = "office"
    WAREHOUSE = "warehouse"
    LAND = "land"
    COMMERCIAL = "commercial"


class PropertyStatus(str, PyEnum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"
    RENTED = "rented"
    OFF_MARKET = "off_market"


class Property(TimestampMixin, SoftDeleteMixin, Base):
    """A listed real-estate property."""

    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str] = mapped_column(String(100), default="España")
    property_type: Mapped[PropertyType] = mapped_column(
        _enum_column(PropertyType, "property_type"), nullable=False
    )
    status: Mapped[PropertyStatus] = mapped_column(
        _enum_column(PropertyStatus, "property_status"),
        nullable=False,
        default=PropertyStatus.AVAILABLE,
    )
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    surface_area: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    garage: Mapped[bool] = mapped_column(Boolean, default=False)
    garden: Mapped[bool] = mapped_column(Boolean, default=False)
    owner_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), nullable=True, index=True
    )
    agent_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), nullable=True, index=True
    )


class ClientStatus(str, PyEnum):
    """CRM pipeline stage."""

    LEAD = "lead"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    NEGOTIATING = "negotiating"
    CLOSED = "closed"
    LOST = "lost"


class ClientSource(str, PyEnum):
    WEBSITE = "website"
    REFERRAL = "referral"
    WALK_IN = "walk_in"
    PHONE = "phone"
    SOCIAL_MEDIA = "social_media"
    PORTAL = "portal"
    ADVERTISING = "advertising"
    OTHER = "other"


class Client(TimestampMixin, SoftDeleteMixin, Base):
    """A buyer or tenant tracked by an agent."""

    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    agent_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), nullable=True, index=True
    )
    status: Mapped[ClientStatus] = mapped_column(
        _enum_column(ClientStatus, "client_status"), default=ClientStatus.LEAD
    )
    source: Mapped[ClientSource] = mapped_column(
        _enum_column(ClientSource, "client_source"), default=ClientSource.OTHER
    )


class FileCategory(str, PyEnum):
    PROPERTY_DOCS = "property_docs"
    PROPERTY_IMAGES = "property_images"
    CLIENT_DOCS = "client_docs"
    CONTRACTS = "contracts"
    OTHER = "other"


class Document(TimestampMixin, SoftDeleteMixin, Base):
    """An uploaded file, optionally shared through an access-token link."""

    __tablename__ = "documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    original_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    category: Mapped[FileCategory] = mapped_column(
        _enum_column(FileCategory, "file_category"),
        nullable=False,
        default=FileCategory.OTHER,
    )
    property_id: Mapped[int | None] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"), nullable=True, index=True
    )
    client_id: Mapped[int | None] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"), nullable=True, index=True
    )
    access_token: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime(), nullable=True
    )
    download_count: Mapped[int] = mapped_column(Integer, default=0)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False)
    uploaded_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
