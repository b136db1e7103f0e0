"""Money, quantities and addresses: the immutable values checkout trades in."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from checkout.domain.exceptions import ValidationError

DEFAULT_CURRENCY = "TRY"
_CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """A non-negative Decimal amount in one currency.

    Every amount is rounded half-up to kuruş (two places) on creation, so
    sums of line totals are exact at currency precision.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )
        object.__setattr__(self, "amount", self.amount.quantize(_CENT, ROUND_HALF_UP))

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        result = self.amount - other.amount
        if result < Decimal("0"):
            raise ValidationError("Money subtraction would result in a negative amount")
        return Money(result, self.currency)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._assert_same_currency(other)
        return self.amount >= other.amount

    def scaled(self, rate: Decimal) -> Money:
        """Return ``amount * rate`` rounded half-up to currency precision."""
        return Money(self.amount * rate, self.currency)

    def subtract_clamped(self, other: Money) -> Money:
        """Subtract, flooring the result at zero."""
        self._assert_same_currency(other)
        return Money(max(Decimal("0"), self.amount - other.amount), self.currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == Decimal("0")

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Build from a string or int without passing through float."""
        try:
            return Money(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> Money:
        return Money(Decimal("0"), currency)


@dataclass(frozen=True)
class Quantity:
    """Units of a product on a cart or order line. Always at least one."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ShippingAddress:
    """Where an order is delivered. Required fields must be non-blank."""

    first_name: str
    last_name: str
    address1: str
    city: str
    zip_code: str
    country: str
    address2: str | None = None
    state: str | None = None
    phone: str | None = None

    _REQUIRED = ("first_name", "last_name", "address1", "city", "zip_code", "country")

    def __post_init__(self) -> None:
        missing = [
            name for name in self._REQUIRED
            if not isinstance(getattr(self, name), str) or not getattr(self, name).strip()
        ]
        if missing:
            raise ValidationError(
                f"Shipping address is missing: {', '.join(missing)}"
            )

    def to_dict(self) -> dict:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "address1": self.address1,
            "address2": self.address2,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
            "phone": self.phone,
        }

    @staticmethod
    def from_dict(raw: dict) -> ShippingAddress:
        if not isinstance(raw, dict):
            raise ValidationError("Shipping address must be an object")
        known = {
            "first_name", "last_name", "address1", "address2",
            "city", "state", "zip_code", "country", "phone",
        }
        unknown = set(raw) - known
        if unknown:
            raise ValidationError(
                f"Unknown shipping address fields: {', '.join(sorted(unknown))}"
            )
        try:
            return ShippingAddress(**raw)
        except TypeError as exc:
            raise ValidationError(f"Invalid shipping address: {exc}") from exc
