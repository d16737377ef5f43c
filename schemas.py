"""
Database Schemas for the Checkout service

Each stored model maps to a MongoDB collection named after the lowercase class
name (Product -> "product"). Stored documents use snake_case keys; the API
speaks camelCase, so every model accepts and emits camelCase aliases.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)


class OrderStatus(str, Enum):
    APPROVED = "APPROVED"
    DECLINED = "DECLINED"
    ERROR = "ERROR"


# -----------------
# Core Collections
# -----------------

class Product(CamelModel):
    title: str = Field(..., description="Product name")
    description: Optional[str] = Field(None, description="Marketing description")
    price: float = Field(..., ge=0, description="Unit price in USD")
    image_url: Optional[str] = Field(None, description="Primary product image URL")
    inventory: int = Field(0, ge=0, description="Units available for sale")
    variants: List[str] = Field(default_factory=list, description="Variant labels, e.g. 'Black/White'")

    @field_validator("variants")
    @classmethod
    def variants_not_blank(cls, value: List[str]) -> List[str]:
        if any(not v.strip() for v in value):
            raise ValueError("Variant labels must be non-empty")
        return value


class Customer(CamelModel):
    """Snapshot of buyer contact/shipping data, one per order submission."""
    full_name: str
    email: str
    phone: str
    address: str
    city: str
    state: str
    zip_code: str


class Order(CamelModel):
    order_number: str = Field(..., description="Random UUID4 token")
    status: OrderStatus
    product_id: str
    variant: Optional[str] = Field(None, description="Free-text variant label")
    quantity: int = Field(..., ge=1)
    customer_id: str


# ---------------
# Request Models
# ---------------

class CustomerData(CamelModel):
    # Missing values are reported by validators.validate_customer
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class PaymentData(CamelModel):
    card_number: Optional[str] = None
    expiry: Optional[str] = None
    cvv: Optional[str] = None


class OrderRequest(CamelModel):
    customer_data: CustomerData = Field(default_factory=CustomerData)
    product_id: str
    variant: Optional[str] = None
    quantity: Optional[int] = None
    transaction_type: Optional[str] = Field(None, description="Simulated outcome: 1=approve, 2=decline, 3=error")
    payment_data: Optional[PaymentData] = None

    @field_validator("product_id", "transaction_type", mode="before")
    @classmethod
    def numbers_to_str(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


# ----------------
# Response Models
# ----------------

class ProductView(Product):
    id: str


class CustomerView(Customer):
    id: str


class OrderReceipt(CamelModel):
    order_number: str
    status: OrderStatus
    message: str


class OrderView(Order):
    id: str
    created_at: Optional[datetime] = None
    customer: CustomerView
    product: Optional[ProductView] = None

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Stored timestamps are UTC; naive reads get the zone back
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class OrderEnvelope(CamelModel):
    order: OrderView
