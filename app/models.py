from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

# Reservation statuses that occupy the property's calendar
BLOCKING_RESERVATION_STATUSES = ("confirmed", "checked_in", "checked_out")

property_extras = Table(
    "property_extras",
    Base.metadata,
    Column("property_id", Integer, ForeignKey("properties.id", ondelete="CASCADE"), primary_key=True),
    Column("extra_id", Integer, ForeignKey("extras.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    role = Column(String(50), default="USER", nullable=False)  # ADMIN, HOST_MANAGER, HOST, HOST_VERIFIED, USER
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    properties = relationship("Property", back_populates="owner")
    pricing_settings = relationship(
        "HostPricingSettings", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )


class PropertyType(Base):
    __tablename__ = "property_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=True)

    properties = relationship("Property", back_populates="property_type")
    commission_rule = relationship("CommissionRule", back_populates="property_type", uselist=False)


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type_id = Column(Integer, ForeignKey("property_types.id"), nullable=True, index=True)
    base_price = Column(Numeric(12, 2), nullable=False)  # Nightly price in EUR
    base_price_mga = Column(Numeric(14, 2), nullable=True)  # Nightly price in Ariary
    latitude = Column(Float, default=0, nullable=False)
    longitude = Column(Float, default=0, nullable=False)
    calendar_feed_token = Column(String(64), unique=True, nullable=True)  # Secret of the public ICS feed
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    owner = relationship("User", back_populates="properties")
    property_type = relationship("PropertyType", back_populates="properties")
    reservations = relationship("Reservation", back_populates="property", cascade="all, delete-orphan")
    blackout_periods = relationship(
        "BlackoutPeriod", back_populates="property", cascade="all, delete-orphan"
    )
    promotions = relationship("Promotion", back_populates="property", cascade="all, delete-orphan")
    special_prices = relationship(
        "SpecialPrice", back_populates="property", cascade="all, delete-orphan"
    )
    extras = relationship("Extra", secondary=property_extras, back_populates="properties")


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)  # Arrival (inclusive)
    end_date = Column(Date, nullable=False)  # Departure (exclusive)
    guest_count = Column(Integer, default=1, nullable=False)
    status = Column(String(20), default="pending", nullable=False, index=True)
    # pending, confirmed, checked_in, checked_out, cancelled
    total_price = Column(Numeric(12, 2), nullable=True)
    currency = Column(String(3), default="EUR", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    property = relationship("Property", back_populates="reservations")
    user = relationship("User")


class BlackoutPeriod(Base):
    __tablename__ = "blackout_periods"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)  # Exclusive, same convention as reservations
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    property = relationship("Property", back_populates="blackout_periods")


class Extra(Base):
    __tablename__ = "extras"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price_eur = Column(Numeric(12, 2), default=0, nullable=False)
    price_mga = Column(Numeric(14, 2), default=0, nullable=False)
    price_type = Column(String(20), default="PER_BOOKING", nullable=False)
    # PER_DAY, PER_PERSON, PER_DAY_PERSON, PER_BOOKING
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)  # NULL = global extra
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    owner = relationship("User")
    properties = relationship("Property", secondary=property_extras, back_populates="extras")


class CommissionRule(Base):
    __tablename__ = "commission_rules"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    host_commission_rate = Column(Float, default=0, nullable=False)  # 0-1
    host_commission_fixed = Column(Numeric(12, 2), default=0, nullable=False)
    client_commission_rate = Column(Float, default=0, nullable=False)  # 0-1
    client_commission_fixed = Column(Numeric(12, 2), default=0, nullable=False)
    # NULL = global fallback rule
    property_type_id = Column(Integer, ForeignKey("property_types.id"), unique=True, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    property_type = relationship("PropertyType", back_populates="commission_rule")


class Promotion(Base):
    __tablename__ = "promotions"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    discount_percentage = Column(Float, nullable=False)  # (0, 100]
    start_date = Column(Date, nullable=False)  # Inclusive
    end_date = Column(Date, nullable=False)  # Inclusive
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    replaced_by_id = Column(Integer, ForeignKey("promotions.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    property = relationship("Property", back_populates="promotions")
    created_by = relationship("User")


class SpecialPrice(Base):
    __tablename__ = "special_prices"

    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    price_eur = Column(Numeric(12, 2), nullable=False)
    price_mga = Column(Numeric(14, 2), nullable=True)
    days = Column(JSON, default=list, nullable=False)  # ["Monday", "Saturday", ...]
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    property = relationship("Property", back_populates="special_prices")


class HostPricingSettings(Base):
    __tablename__ = "host_pricing_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    promotion_priority = Column(String(30), default="MOST_ADVANTAGEOUS", nullable=False)
    # PROMOTION_FIRST, SPECIAL_PRICE_FIRST, MOST_ADVANTAGEOUS, STACK_DISCOUNTS

    user = relationship("User", back_populates="pricing_settings")
