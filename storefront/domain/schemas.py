# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, EmailStr, field_validator
from typing import List
from decimal import Decimal
from datetime import date, datetime

#gorna granica ilosci w linii koszyka, miesci sie w kolumnie Integer (32 bit)
MAX_LINE_QUANTITY = 2_147_483_647


def not_blank_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


class LoginIn(BaseModel):
    """Dane logowania haslem."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)

    @field_validator("username", "password")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return not_blank_text(value)


class AccountCreate(BaseModel):
    """Rejestracja konta."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8, max_length=72)
    full_name: str | None = Field(None, max_length=255)
    date_of_birth: date | None = None
    address: str | None = Field(None, max_length=500)
    email: EmailStr | None = None

    @field_validator("username")
    @classmethod
    def not_blank(cls, value: str) -> str:
        return not_blank_text(value)

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        #bcrypt bierze max 72 bajty
        if len(value.encode("utf-8")) > 72:
            raise ValueError("must be at most 72 bytes")
        return value


class AccountUpdate(BaseModel):
    """Edycja wlasnego konta - wszystkie pola wymagane."""

    full_name: str = Field(..., min_length=1, max_length=255)
    date_of_birth: date
    address: str = Field(..., min_length=1, max_length=500)
    email: EmailStr

    @field_validator("full_name", "address")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return not_blank_text(value)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class AccountRead(BaseModel):
    id: int
    username: str
    full_name: str | None = None
    date_of_birth: date | None = None
    address: str | None = None
    email: str | None = None

    model_config = ConfigDict(from_attributes=True)


class AccountIdentity(BaseModel):
    """Kanoniczna tozsamosc zwracana przez kazdy Authenticator."""

    id: int
    username: str


class SessionContext(BaseModel):
    """Jawny kontekst sesji przekazywany do operacji."""

    token: str
    account_id: int
    username: str
    expires_at: datetime


class UserOut(BaseModel):
    username: str
    id: int


class ProductOut(BaseModel):
    id: int
    name: str
    unit_price: Decimal
    stock: int
    category_id: int | None = None

    model_config = ConfigDict(from_attributes=True)


class CartUpdateIn(BaseModel):
    """Upsert linii koszyka, quantity <= 0 usuwa linie."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(..., le=MAX_LINE_QUANTITY)


class CartItemOut(BaseModel):
    product_id: int
    quantity: int
    unit_price_snapshot: Decimal | None = None

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    id: int
    account_id: int
    status: str
    items: List[CartItemOut]

    model_config = ConfigDict(from_attributes=True)


class CartDetailItemOut(BaseModel):
    """Linia koszyka z aktualna cena z katalogu (tylko do wyswietlania)."""

    product_id: int
    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class CartDetailOut(BaseModel):
    id: int
    account_id: int
    status: str
    items: List[CartDetailItemOut]
    total: Decimal


class OrderItemOut(BaseModel):
    product_id: int
    quantity: int
    unit_price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    cart_id: int
    account_id: int
    status: str
    total: Decimal
    created_at: datetime
    confirmed_at: datetime | None = None
    items: List[OrderItemOut] = []

    model_config = ConfigDict(from_attributes=True)
