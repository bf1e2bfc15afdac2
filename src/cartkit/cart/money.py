"""Money and totals value objects."""

from decimal import Decimal as PyDecimal

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Decimal, String, ValueObject

from cartkit.domain import cartkit

DEFAULT_CURRENCY = "USD"


@cartkit.value_object
class Money:
    """A decimal amount in a single ISO 4217 currency.

    Amounts may be negative (modifier price deltas, discounts). Equality is
    numeric, so ``2.50 USD`` equals ``2.5 USD``.
    """

    amount = Decimal(required=True)
    currency_code = String(max_length=3, default=DEFAULT_CURRENCY)

    @invariant.post
    def currency_code_must_be_iso_4217_shaped(self):
        code = self.currency_code
        if code is None or len(code) != 3 or not code.isalpha() or not code.isupper():
            raise ValidationError({"currency_code": [f"Unsupported currency: {code}"]})

    @classmethod
    def zero(cls, currency_code: str = DEFAULT_CURRENCY) -> "Money":
        return cls(amount=PyDecimal("0"), currency_code=currency_code)

    def __add__(self, other: "Money") -> "Money":
        self._require_same_currency(other)
        return Money(amount=self.amount + other.amount, currency_code=self.currency_code)

    def __sub__(self, other: "Money") -> "Money":
        self._require_same_currency(other)
        return Money(amount=self.amount - other.amount, currency_code=self.currency_code)

    def times(self, factor: int | PyDecimal) -> "Money":
        return Money(amount=self.amount * PyDecimal(factor), currency_code=self.currency_code)

    def clamped_at_zero(self) -> "Money":
        if self.amount < 0:
            return Money.zero(self.currency_code)
        return self

    def is_less_than(self, other: "Money") -> bool:
        """Compare amounts; both sides must share a currency."""
        self._require_same_currency(other)
        return self.amount < other.amount

    def _require_same_currency(self, other: "Money") -> None:
        if other.currency_code != self.currency_code:
            raise ValidationError(
                {"currency": [f"Cannot combine {self.currency_code} with {other.currency_code}"]}
            )

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return False
        return self.amount == other.amount and self.currency_code == other.currency_code

    def __hash__(self) -> int:
        return hash((self.amount, self.currency_code))

    def __str__(self) -> str:
        return f"{self.amount} {self.currency_code}"


@cartkit.value_object
class CartTotals:
    """Priced breakdown of a single cart. Derived, never persisted."""

    subtotal = ValueObject(Money, required=True)
    delivery_fee = ValueObject(Money, required=True)
    service_fee = ValueObject(Money, required=True)
    tax = ValueObject(Money, required=True)
    grand_total = ValueObject(Money, required=True)

    @classmethod
    def from_subtotal(
        cls,
        subtotal: Money,
        delivery_fee: Money | None = None,
        service_fee: Money | None = None,
        tax: Money | None = None,
        grand_total: Money | None = None,
    ) -> "CartTotals":
        """Build totals, filling missing parts with zero in the subtotal currency.

        The grand total defaults to the sum of every other component.
        """
        zero = Money.zero(subtotal.currency_code)
        delivery_fee = delivery_fee if delivery_fee is not None else zero
        service_fee = service_fee if service_fee is not None else zero
        tax = tax if tax is not None else zero
        if grand_total is None:
            grand_total = subtotal + delivery_fee + service_fee + tax
        return cls(
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            service_fee=service_fee,
            tax=tax,
            grand_total=grand_total,
        )

    @classmethod
    def zero(cls, currency_code: str = DEFAULT_CURRENCY) -> "CartTotals":
        return cls.from_subtotal(Money.zero(currency_code))

    @property
    def currency_code(self) -> str:
        return self.subtotal.currency_code

    def components(self) -> tuple[Money, Money, Money, Money, Money]:
        return (self.subtotal, self.delivery_fee, self.service_fee, self.tax, self.grand_total)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return False
        return self.components() == other.components()

    def __hash__(self) -> int:
        return hash(self.components())
