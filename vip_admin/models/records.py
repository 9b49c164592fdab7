"""Typed records read from the store and the form models written to it.

Read models (``*Record``) are built from ORM rows. Write models (``*Form`` and
patches) are the only shapes the store accepts for ``add``/``update``, so
every write is validated before it leaves the process.
"""

import re
from datetime import datetime
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from vip_admin.core.errors import RecordValidationError
from vip_admin.utils.text import parse_amount, slugify, sum_of_digits, total_digits

NUMBER_PATTERN = re.compile(r"^\d+([-\s]?\d+)*$")

VipNumberStatus = Literal["available", "sold", "booked"]
NumberPackStatus = Literal["available", "sold", "partially-sold"]
CategoryType = Literal["individual", "pack"]
ORDER_STATUSES = (
    "created",
    "paid",
    "pending",
    "processing",
    "shipped",
    "delivered",
    "cancelled",
    "failed",
    "refunded",
    "confirmed",
)
OrderStatus = Literal[
    "created",
    "paid",
    "pending",
    "processing",
    "shipped",
    "delivered",
    "cancelled",
    "failed",
    "refunded",
    "confirmed",
]


# Read models


class ListableRecord(BaseModel):
    """Shape shared by every paginated record: store id + creation time."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class CategoryRecord(ListableRecord):
    title: str
    slug: str
    order: int
    type: CategoryType
    updated_at: datetime | None = None


class VipNumberRecord(ListableRecord):
    number: str
    price: int
    original_price: int | None = None
    discount: float | None = None
    status: str
    category_slug: str
    description: str | None = None
    image_hint: str | None = None
    is_vip: bool = False
    sum_of_digits: str | None = None
    total_digits: str | None = None
    updated_at: datetime | None = None


class NumberPackItem(BaseModel):
    number: str
    price: float
    original_vip_number_id: str | None = None

    @field_validator("number")
    @classmethod
    def validate_number(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Number is required.")
        if not NUMBER_PATTERN.match(v):
            raise ValueError("Number must contain only digits and optional hyphens/spaces.")
        return v

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v: Any) -> float:
        price = parse_amount(v)
        if price is None:
            raise ValueError("Price for item is required.")
        if price < 0:
            raise ValueError("Item price must be positive.")
        return price


class NumberPackRecord(ListableRecord):
    name: str
    numbers: list[NumberPackItem] = Field(default_factory=list)
    total_original_price: float | None = None
    status: str
    category_slug: str
    description: str | None = None
    image_hint: str | None = None
    is_vip_pack: bool = False
    updated_at: datetime | None = None

    @property
    def items_count(self) -> int:
        return len(self.numbers)

    @property
    def pack_price(self) -> float:
        return sum(item.price for item in self.numbers)


class TransactionRecord(ListableRecord):
    payment_id: str
    order_id: str
    amount: float | None = None
    currency: str = "INR"
    status: str | None = None
    method: str | None = None
    email: str | None = None
    provider: str | None = None
    user_id: str | None = None
    verified: bool | None = None
    updated_at: datetime | None = None


class RefundRecord(ListableRecord):
    refund_id: str
    payment_id: str
    order_id: str
    amount: float | None = None
    currency: str = "INR"
    status: str | None = None


class OrderRecord(ListableRecord):
    order_id: str
    customer_name: str | None = None
    customer_email: str | None = None
    amount: float | None = None
    currency: str = "INR"
    order_status: str
    updated_at: datetime | None = None


class CustomerRecord(ListableRecord):
    name: str | None = None
    email: str
    phone: str | None = None


# Write models


class CategoryForm(BaseModel):
    title: str = Field(min_length=3)
    slug: str
    order: int = Field(ge=0)
    type: CategoryType

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return v.strip()

    @field_validator("slug")
    @classmethod
    def normalize_slug(cls, v: str) -> str:
        slug = slugify(v)
        if not slug:
            raise ValueError("Slug is required.")
        return slug


class VipNumberForm(BaseModel):
    number: str
    price: int
    original_price: int | None = None
    discount: float | None = Field(default=None, ge=0, le=100)
    status: VipNumberStatus = "available"
    category_slug: str
    description: str | None = None
    image_hint: str | None = Field(default=None, max_length=50)
    is_vip: bool = False
    sum_of_digits: str | None = None
    total_digits: str | None = None

    @field_validator("number")
    @classmethod
    def validate_number(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("VIP Number is required.")
        if not NUMBER_PATTERN.match(v):
            raise ValueError("Number must contain only digits and optional hyphens/spaces.")
        return v

    @field_validator("price", mode="before")
    @classmethod
    def round_price(cls, v: Any) -> int:
        price = parse_amount(v)
        if price is None:
            raise ValueError("Price is required.")
        if price < 0:
            raise ValueError("Price must be a positive integer.")
        return round(price)

    @field_validator("original_price", mode="before")
    @classmethod
    def round_original_price(cls, v: Any) -> int | None:
        price = parse_amount(v)
        if price is None:
            return None
        if price < 0:
            raise ValueError("Original price must be positive.")
        return round(price)

    @field_validator("discount", mode="before")
    @classmethod
    def parse_discount(cls, v: Any) -> float | None:
        return parse_amount(v)

    @field_validator("category_slug")
    @classmethod
    def require_category(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Category is required.")
        return v

    @field_validator("description", "image_hint", "sum_of_digits", "total_digits", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def fill_digit_stats(self) -> "VipNumberForm":
        if self.sum_of_digits is None:
            self.sum_of_digits = str(sum_of_digits(self.number))
        if self.total_digits is None:
            self.total_digits = str(total_digits(self.number))
        return self


class NumberPackForm(BaseModel):
    name: str = Field(min_length=3)
    numbers: list[NumberPackItem] = Field(min_length=1)
    total_original_price: float | None = None
    status: NumberPackStatus = "available"
    category_slug: str
    description: str | None = None
    image_hint: str | None = Field(default=None, max_length=50)
    is_vip_pack: bool = False

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("total_original_price", mode="before")
    @classmethod
    def parse_total(cls, v: Any) -> float | None:
        total = parse_amount(v)
        if total is not None and total < 0:
            raise ValueError("Total original price must be positive.")
        return total

    @field_validator("category_slug")
    @classmethod
    def require_category(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Category Slug is required.")
        return v

    @field_validator("description", "image_hint", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def default_total(self) -> "NumberPackForm":
        if self.total_original_price is None:
            self.total_original_price = sum(item.price for item in self.numbers)
        return self


class OrderStatusPatch(BaseModel):
    order_status: OrderStatus


class LoginForm(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


def validate_form(model: type[BaseModel], data: Any) -> Any:
    """Validate raw form data, converting pydantic errors to a local error.

    Raises:
        RecordValidationError: with one message per failing field.
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        fields = {}
        for error in e.errors():
            loc = ".".join(str(part) for part in error.get("loc", ())) or "form"
            msg = str(error.get("msg", "Invalid value"))
            fields[loc] = msg.removeprefix("Value error, ")
        message = "; ".join(f"{loc}: {msg}" for loc, msg in fields.items())
        raise RecordValidationError(message, details={"fields": fields}) from e
