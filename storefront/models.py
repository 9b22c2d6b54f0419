from decimal import Decimal
from typing import Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

PaymentMethod = Literal["PIX"]
ItemId = Union[int, str]


class CartItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: ItemId
    product_id: Optional[ItemId] = Field(default=None, alias="productId")
    name: str = ""
    price: Decimal = Field(ge=0)
    qty: int = Field(default=1, ge=1)
    image: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def _float_price_via_str(cls, value):
        # 199.9 must stay 199.90, not the binary expansion of the float
        if isinstance(value, float):
            return str(value)
        return value

    @property
    def external_ref(self) -> ItemId:
        return self.product_id if self.product_id is not None else self.id


class Customer(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class ShippingAddress(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    zip_code: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("zipCode", "postalCode", "zip_code")
    )
    street: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    number: Optional[Union[str, int]] = None
    complement: Optional[str] = None


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cart: list[CartItem] = Field(min_length=1)
    customer: Customer = Field(default_factory=Customer)
    shipping: Optional[ShippingAddress] = None
    payment_method: PaymentMethod = Field(default="PIX", alias="paymentMethod")
    bump_added: bool = Field(default=False, alias="bumpAdded")

    @field_validator("customer", mode="before")
    @classmethod
    def _customer_may_be_null(cls, value):
        return {} if value is None else value

    @field_validator("payment_method", mode="before")
    @classmethod
    def _payment_method_may_be_null(cls, value):
        return "PIX" if value is None else value

    @field_validator("bump_added", mode="before")
    @classmethod
    def _bump_may_be_null(cls, value):
        return False if value is None else value


class PricingResult(BaseModel):
    subtotal: Decimal
    shipping_cost: Decimal
    bump_cost: Decimal
    total: Decimal
    amount_in_cents: int


class PixInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    qrcode: Optional[str] = None
    expiration_date: Optional[str] = Field(default=None, alias="expirationDate")
    amount: Optional[Union[int, float, str]] = None


class CheckoutResponse(BaseModel):
    ok: Literal[True] = True
    payment: dict[str, Any]
    pix: PixInfo
    status: str


class PaymentStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: Literal[True] = True
    id: str
    status: str
    amount: Any
    gateway_response: dict[str, Any] = Field(alias="gatewayResponse")


class Product(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    price: Decimal
    old_price: Optional[Decimal] = Field(default=None, alias="oldPrice")
    category: str = "Geral"
    image: Optional[str] = None
    rating: float = 5
    reviews: int = 0
    description: str = ""
