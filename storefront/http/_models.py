"""
HTTP models — request payloads (to_domain) and response bodies (from_domain).

Field names are camelCase on the wire; see WireModel.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import Field, RootModel

from storefront.checkout import (
    Address,
    CartLine,
    CartView,
    CheckoutSession,
    OrderConfirmation,
    PaymentMethod,
    ShippingMethod,
    Totals,
)
from storefront.identity import CustomerInfo, TokenGrant
from storefront.wire import Money, WireModel


# ═══════════════════════════════════════════════════════════════════════════════
# Commands
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Login:
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class Register:
    email: str
    password: str
    confirm_password: str
    first_name: str
    last_name: str


@dataclass(frozen=True, slots=True)
class Refresh:
    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class AddToCart:
    product_id: str
    quantity: int
    entered_price: Decimal | None


@dataclass(frozen=True, slots=True)
class UpdateCartItem:
    item_id: str
    quantity: int


@dataclass(frozen=True, slots=True)
class ShippingAddressChoice:
    address: Address | None
    same_as_billing: bool


@dataclass(frozen=True, slots=True)
class PlaceOrder:
    accepted_terms: bool
    order_notes: str | None


# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════


class NoInput(WireModel):
    def to_domain(self) -> None:
        return None


class LoginIn(WireModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)

    def to_domain(self) -> Login:
        return Login(email=self.email.strip(), password=self.password)


class RegisterIn(WireModel):
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=6)
    confirm_password: str
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)

    def to_domain(self) -> Register:
        return Register(
            email=self.email.strip(),
            password=self.password,
            confirm_password=self.confirm_password,
            first_name=self.first_name.strip(),
            last_name=self.last_name.strip(),
        )


class RefreshIn(WireModel):
    access_token: str = Field(min_length=1)
    refresh_token: str = Field(min_length=1)

    def to_domain(self) -> Refresh:
        return Refresh(access_token=self.access_token, refresh_token=self.refresh_token)


class AddToCartIn(WireModel):
    product_id: str = Field(min_length=1)
    quantity: int = 1
    entered_price: Decimal | None = None

    def to_domain(self) -> AddToCart:
        return AddToCart(self.product_id, self.quantity, self.entered_price)


class UpdateCartItemIn(WireModel):
    item_id: str = Field(min_length=1)
    quantity: int

    def to_domain(self) -> UpdateCartItem:
        return UpdateCartItem(self.item_id, self.quantity)


class CartItemRefIn(WireModel):
    item_id: str = Field(min_length=1)

    def to_domain(self) -> str:
        return self.item_id


class AddressDto(WireModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone_number: str = ""
    company: str = ""
    address1: str = Field(min_length=1)
    address2: str = ""
    city: str = Field(min_length=1)
    state_province_id: str = ""
    state_province_name: str = ""
    zip_postal_code: str = Field(min_length=1)
    country_id: str = Field(min_length=1)
    country_name: str = ""

    def to_domain(self) -> Address:
        return Address(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone_number=self.phone_number,
            company=self.company,
            address1=self.address1,
            address2=self.address2,
            city=self.city,
            state_province_id=self.state_province_id,
            state_province_name=self.state_province_name,
            zip_postal_code=self.zip_postal_code,
            country_id=self.country_id,
            country_name=self.country_name,
        )

    @classmethod
    def from_domain(cls, dom: Address) -> AddressDto:
        return cls(
            first_name=dom.first_name,
            last_name=dom.last_name,
            email=dom.email,
            phone_number=dom.phone_number,
            company=dom.company,
            address1=dom.address1,
            address2=dom.address2,
            city=dom.city,
            state_province_id=dom.state_province_id,
            state_province_name=dom.state_province_name,
            zip_postal_code=dom.zip_postal_code,
            country_id=dom.country_id,
            country_name=dom.country_name,
        )


class ShippingAddressIn(WireModel):
    same_as_billing: bool = True
    address: AddressDto | None = None

    def to_domain(self) -> ShippingAddressChoice:
        return ShippingAddressChoice(
            address=self.address.to_domain() if self.address else None,
            same_as_billing=self.same_as_billing,
        )


class MethodChoiceIn(WireModel):
    method_id: str = Field(min_length=1)

    def to_domain(self) -> str:
        return self.method_id


class PlaceOrderIn(WireModel):
    accepted_terms: bool = False
    order_notes: str | None = Field(default=None, max_length=1000)

    def to_domain(self) -> PlaceOrder:
        return PlaceOrder(self.accepted_terms, self.order_notes)


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class CustomerInfoOut(WireModel):
    email: str
    first_name: str
    last_name: str
    full_name: str

    @classmethod
    def from_domain(cls, dom: CustomerInfo) -> CustomerInfoOut:
        return cls(
            email=dom.email,
            first_name=dom.first_name,
            last_name=dom.last_name,
            full_name=dom.full_name,
        )


class TokenGrantOut(WireModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    user_type: str
    customer_guid: UUID
    customer_info: CustomerInfoOut | None = None

    @classmethod
    def from_domain(cls, dom: TokenGrant) -> TokenGrantOut:
        return cls(
            access_token=dom.access_token,
            refresh_token=dom.refresh_token,
            expires_in=dom.expires_in,
            user_type=dom.user_type.value,
            customer_guid=dom.customer_guid,
            customer_info=(
                CustomerInfoOut.from_domain(dom.customer_info) if dom.customer_info else None
            ),
        )


class TotalsOut(WireModel):
    subtotal: Money
    discount_amount: Money
    shipping_cost: Money
    tax_amount: Money
    payment_fee: Money
    total: Money
    currency: str

    @classmethod
    def from_domain(cls, dom: Totals) -> TotalsOut:
        return cls(
            subtotal=dom.subtotal,
            discount_amount=dom.discount_amount,
            shipping_cost=dom.shipping_cost,
            tax_amount=dom.tax_amount,
            payment_fee=dom.payment_fee,
            total=dom.total,
            currency=dom.currency,
        )


class CartLineOut(WireModel):
    id: str
    product_id: str
    product_name: str
    sku: str
    quantity: int
    unit_price: Money
    sub_total: Money

    @classmethod
    def from_domain(cls, dom: CartLine) -> CartLineOut:
        return cls(
            id=dom.id,
            product_id=dom.product_id,
            product_name=dom.name,
            sku=dom.sku,
            quantity=dom.quantity,
            unit_price=dom.unit_price,
            sub_total=dom.line_total,
        )


class CartOut(WireModel):
    items: list[CartLineOut]
    totals: TotalsOut
    total_items: int
    is_empty: bool

    @classmethod
    def from_domain(cls, dom: CartView) -> CartOut:
        return cls(
            items=[CartLineOut.from_domain(line) for line in dom.lines],
            totals=TotalsOut.from_domain(dom.totals),
            total_items=dom.total_items,
            is_empty=dom.is_empty,
        )


class ShippingMethodOut(WireModel):
    id: str
    name: str
    description: str
    cost: Money
    delivery_time: str
    is_selected: bool

    @classmethod
    def from_domain(cls, dom: ShippingMethod) -> ShippingMethodOut:
        return cls(
            id=dom.id,
            name=dom.name,
            description=dom.description,
            cost=dom.cost,
            delivery_time=dom.delivery_time,
            is_selected=dom.is_selected,
        )


class PaymentMethodOut(WireModel):
    id: str
    name: str
    description: str
    fee: Money
    requires_additional_info: bool
    is_selected: bool

    @classmethod
    def from_domain(cls, dom: PaymentMethod) -> PaymentMethodOut:
        return cls(
            id=dom.id,
            name=dom.name,
            description=dom.description,
            fee=dom.fee,
            requires_additional_info=dom.requires_additional_info,
            is_selected=dom.is_selected,
        )


class ShippingMethodsOut(RootModel[list[ShippingMethodOut]]):
    @classmethod
    def from_domain(cls, dom: tuple[ShippingMethod, ...]) -> ShippingMethodsOut:
        return cls([ShippingMethodOut.from_domain(m) for m in dom])


class PaymentMethodsOut(RootModel[list[PaymentMethodOut]]):
    @classmethod
    def from_domain(cls, dom: tuple[PaymentMethod, ...]) -> PaymentMethodsOut:
        return cls([PaymentMethodOut.from_domain(m) for m in dom])


class CheckoutSessionOut(WireModel):
    stage: str
    is_guest_checkout: bool
    customer_email: str | None
    items: list[CartLineOut]
    billing_address: AddressDto | None
    shipping_address: AddressDto | None
    shipping_same_as_billing: bool
    available_shipping_methods: list[ShippingMethodOut]
    selected_shipping_method: ShippingMethodOut | None
    available_payment_methods: list[PaymentMethodOut]
    selected_payment_method: PaymentMethodOut | None
    order_notes: str | None
    totals: TotalsOut

    @classmethod
    def from_domain(cls, dom: CheckoutSession) -> CheckoutSessionOut:
        shipping = dom.selected_shipping_method
        payment = dom.selected_payment_method
        return cls(
            stage=dom.stage.name.lower(),
            is_guest_checkout=dom.is_guest_checkout,
            customer_email=dom.customer_email,
            items=[CartLineOut.from_domain(line) for line in dom.cart],
            billing_address=AddressDto.from_domain(dom.billing_address) if dom.billing_address else None,
            shipping_address=AddressDto.from_domain(dom.shipping_address) if dom.shipping_address else None,
            shipping_same_as_billing=dom.shipping_same_as_billing,
            available_shipping_methods=[
                ShippingMethodOut.from_domain(m) for m in dom.available_shipping_methods
            ],
            selected_shipping_method=ShippingMethodOut.from_domain(shipping) if shipping else None,
            available_payment_methods=[
                PaymentMethodOut.from_domain(m) for m in dom.available_payment_methods
            ],
            selected_payment_method=PaymentMethodOut.from_domain(payment) if payment else None,
            order_notes=dom.order_notes,
            totals=TotalsOut.from_domain(dom.totals),
        )


class OrderConfirmationOut(WireModel):
    order_id: UUID
    order_number: str
    order_total: Money
    currency: str
    order_status: str
    payment_status: str
    order_date: datetime
    estimated_delivery_date: datetime
    requires_payment: bool
    message: str
    totals: TotalsOut

    @classmethod
    def from_domain(cls, dom: OrderConfirmation) -> OrderConfirmationOut:
        return cls(
            order_id=dom.order_id,
            order_number=dom.order_number,
            order_total=dom.order_total,
            currency=dom.currency,
            order_status=dom.order_status,
            payment_status=dom.payment_status,
            order_date=dom.order_date,
            estimated_delivery_date=dom.estimated_delivery_date,
            requires_payment=dom.requires_payment,
            message=dom.message,
            totals=TotalsOut.from_domain(dom.totals),
        )
