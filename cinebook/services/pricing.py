"""
Price engine.

A booking total is a pure function of a PricingContext:

    subtotal   = base_price * seat_count * theater.value
    discounted = subtotal * (1 - discount_rate)
    with_tax   = discounted * (1 + tax_rate)
    total      = round2(with_tax + service_fee + extras)

Only one discount rate is held by a context; the convenience methods
overwrite it, so the last one applied wins. The theater multiplier is
read off the theater type, never stored on its own.
"""
from dataclasses import dataclass, field, replace
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, List, Optional

from cinebook.services.errors import InvalidRequest


class Extra(Enum):
    POPCORN = "popcorn"
    THREE_D_GLASSES = "3d_glasses"
    PREMIUM_SEAT = "premium_seat"
    VIP_LOUNGE = "vip_lounge"
    PARKING = "parking"
    MEAL_VOUCHER = "meal_voucher"
    INSURANCE = "insurance"


class TheaterType(Enum):
    STANDARD = 1.0
    IMAX = 1.8
    VIP = 2.5
    DOLBY_ATMOS = 1.5
    FOUR_DX = 2.0

    @classmethod
    def parse(cls, name):
        """Unknown or missing theater names fall back to STANDARD."""
        if isinstance(name, cls):
            return name
        key = str(name or "").strip().upper().replace("-", "_").replace(" ", "_")
        aliases = {"4DX": "FOUR_DX", "DOLBY": "DOLBY_ATMOS"}
        return cls.__members__.get(aliases.get(key, key), cls.STANDARD)


@dataclass(frozen=True)
class ExtraPrice:
    label: str
    options: Dict[str, float]
    default_option: str
    per_seat: bool = False

    def cost(self, option=None):
        if option is not None and not isinstance(option, str):
            raise InvalidRequest(f"Option for {self.label} must be a string")
        return self.options.get((option or self.default_option).lower(),
                                self.options[self.default_option])


# VIP lounge and parking are charged once per booking, premium seats per seat.
EXTRA_PRICES = {
    Extra.POPCORN: ExtraPrice("Popcorn & Drink Combo",
                              {"small": 5.99, "medium": 7.99, "large": 9.99}, "medium"),
    Extra.THREE_D_GLASSES: ExtraPrice("3D Glasses", {"standard": 3.50}, "standard"),
    Extra.MEAL_VOUCHER: ExtraPrice("Meal Voucher",
                                   {"snack": 8.99, "dinner": 15.99, "deluxe": 22.99}, "snack"),
    Extra.INSURANCE: ExtraPrice("Cancellation Insurance", {"standard": 2.50}, "standard"),
    Extra.VIP_LOUNGE: ExtraPrice("VIP Lounge Access", {"standard": 15.00}, "standard"),
    Extra.PARKING: ExtraPrice("Reserved Parking", {"standard": 5.00}, "standard"),
    Extra.PREMIUM_SEAT: ExtraPrice("Premium Reclining Seat", {"standard": 5.00}, "standard",
                                   per_seat=True),
}

PACKAGES = {
    "standard": {Extra.POPCORN: "medium"},
    "premium": {Extra.PREMIUM_SEAT: None, Extra.POPCORN: "large", Extra.PARKING: None},
    "vip": {
        Extra.PREMIUM_SEAT: None,
        Extra.VIP_LOUNGE: None,
        Extra.MEAL_VOUCHER: "deluxe",
        Extra.PARKING: None,
        Extra.INSURANCE: None,
    },
    "3d": {Extra.THREE_D_GLASSES: None, Extra.POPCORN: "medium"},
}

STUDENT_DISCOUNT = 0.15
SENIOR_DISCOUNT = 0.20
WEEKDAY_DISCOUNT = 0.10
GROUP_DISCOUNTS = ((10, 0.15), (5, 0.10))

_CENT = Decimal("0.01")


def round2(value):
    """Round half-up to cents."""
    return float(Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


@dataclass
class PricingContext:
    base_price: float = 10.0
    seat_count: int = 0
    discount_rate: float = 0.0
    service_fee: float = 1.5
    tax_rate: float = 0.0
    theater: TheaterType = TheaterType.STANDARD
    extras: Dict[Extra, Optional[str]] = field(default_factory=dict)

    @property
    def theater_multiplier(self):
        return self.theater.value

    def apply_student_discount(self):
        self.discount_rate = STUDENT_DISCOUNT
        return self

    def apply_senior_discount(self):
        self.discount_rate = SENIOR_DISCOUNT
        return self

    def apply_weekday_discount(self):
        self.discount_rate = WEEKDAY_DISCOUNT
        return self

    def apply_group_discount(self, number_of_seats=None):
        """10% from 5 seats, 15% from 10. Smaller groups keep the current rate."""
        seats = self.seat_count if number_of_seats is None else number_of_seats
        for threshold, rate in GROUP_DISCOUNTS:
            if seats >= threshold:
                self.discount_rate = rate
                break
        return self

    def set_theater(self, theater):
        self.theater = TheaterType.parse(theater)
        return self

    def add_extra(self, extra, option=None):
        self.extras[extra] = option
        return self

    def apply_package(self, name):
        if not isinstance(name, str):
            raise InvalidRequest("Package must be a name")
        try:
            package = PACKAGES[name.lower()]
        except KeyError:
            raise InvalidRequest(f"Unknown package: {name}")
        for extra, option in package.items():
            self.add_extra(extra, option)
        return self

    def for_seats(self, seat_count):
        """Copy of this context priced for ``seat_count`` seats."""
        return replace(self, seat_count=seat_count, extras=dict(self.extras))


@dataclass(frozen=True)
class PriceLine:
    label: str
    amount: float


@dataclass(frozen=True)
class PriceBreakdown:
    seat_count: int
    theater: str
    subtotal: float
    discount_rate: float
    discount_amount: float
    tax_amount: float
    service_fee: float
    extras: List[PriceLine]
    total: float

    def summary(self):
        lines = [
            "Booking Summary:",
            f"Theater Type: {self.theater}",
            f"Number of Seats: {self.seat_count}",
            f"Subtotal: ${self.subtotal:.2f}",
        ]
        if self.discount_rate > 0:
            lines.append(f"Discount ({round(self.discount_rate * 100)}%): -${self.discount_amount:.2f}")
        lines.append(f"Service Fee: ${self.service_fee:.2f}")
        if self.tax_amount > 0:
            lines.append(f"Tax: ${self.tax_amount:.2f}")
        for line in self.extras:
            lines.append(f"{line.label}: ${line.amount:.2f}")
        lines.append(f"Total: ${self.total:.2f}")
        return "\n".join(lines)

    def to_dict(self):
        return {
            "seat_count": self.seat_count,
            "theater": self.theater,
            "subtotal": self.subtotal,
            "discount_rate": self.discount_rate,
            "discount_amount": self.discount_amount,
            "tax_amount": self.tax_amount,
            "service_fee": self.service_fee,
            "extras": [{"label": line.label, "amount": line.amount} for line in self.extras],
            "total": self.total,
        }


def extra_lines(ctx):
    lines = []
    for extra, option in ctx.extras.items():
        price = EXTRA_PRICES[extra]
        cost = price.cost(option)
        if price.per_seat:
            lines.append(PriceLine(f"{price.label} x{ctx.seat_count}", cost * ctx.seat_count))
        else:
            label = f"{price.label} ({option})" if option else price.label
            lines.append(PriceLine(label, cost))
    return lines


def price_breakdown(ctx):
    subtotal = ctx.base_price * ctx.seat_count * ctx.theater_multiplier
    discounted = subtotal * (1 - ctx.discount_rate)
    with_tax = discounted * (1 + ctx.tax_rate)
    lines = extra_lines(ctx)
    total = round2(with_tax + ctx.service_fee + sum(line.amount for line in lines))
    return PriceBreakdown(
        seat_count=ctx.seat_count,
        theater=ctx.theater.name,
        subtotal=round2(subtotal),
        discount_rate=ctx.discount_rate,
        discount_amount=round2(subtotal - discounted),
        tax_amount=round2(with_tax - discounted),
        service_fee=ctx.service_fee,
        extras=[PriceLine(line.label, round2(line.amount)) for line in lines],
        total=total,
    )


def calculate_total(ctx):
    return price_breakdown(ctx).total


def parse_extra(name):
    key = str(name).strip().lower().replace("-", "_").replace(" ", "_")
    aliases = {"three_d_glasses": "3d_glasses", "glasses": "3d_glasses", "meal": "meal_voucher",
               "vip": "vip_lounge", "premium": "premium_seat", "popcorn_drink": "popcorn"}
    key = aliases.get(key, key)
    for extra in Extra:
        if extra.value == key:
            return extra
    raise InvalidRequest(f"Unknown extra: {name}")


def _group_size(value):
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidRequest("group_size must be a whole number")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidRequest("group_size must be a whole number")


def pricing_from_options(options, seat_count=0, base_price=10.0, service_fee=1.5, tax_rate=0.0):
    """
    Build a PricingContext from a client's JSON options mapping.

    Money settings (``base_price``, ``service_fee``, ``tax_rate``) come from
    the arguments only; a client cannot set them. Recognised keys are
    ``theater``, ``discounts`` (list applied in order, of "student",
    "senior", "weekday", "group"), ``group_size``, ``package`` and
    ``extras`` (names, or objects with ``name`` and ``option``).
    """
    if options is None:
        options = {}
    if not isinstance(options, dict):
        raise InvalidRequest("Pricing options must be an object")
    ctx = PricingContext(
        base_price=base_price,
        service_fee=service_fee,
        tax_rate=tax_rate,
        seat_count=seat_count,
    )

    ctx.set_theater(options.get("theater"))

    discounts = options.get("discounts") or []
    if isinstance(discounts, str):
        discounts = [discounts]
    if not isinstance(discounts, (list, tuple)):
        raise InvalidRequest("discounts must be a name or a list of names")
    for name in discounts:
        name = str(name).lower()
        if name == "student":
            ctx.apply_student_discount()
        elif name == "senior":
            ctx.apply_senior_discount()
        elif name == "weekday":
            ctx.apply_weekday_discount()
        elif name == "group":
            ctx.apply_group_discount(_group_size(options.get("group_size")))
        else:
            raise InvalidRequest(f"Unknown discount: {name}")

    if options.get("package") is not None:
        ctx.apply_package(options["package"])

    extras = options.get("extras") or []
    if not isinstance(extras, (list, tuple)):
        raise InvalidRequest("extras must be a list")
    for item in extras:
        if isinstance(item, dict):
            name, option = item.get("name"), item.get("option")
        else:
            name, option = item, None
        if not isinstance(name, str):
            raise InvalidRequest("Extra names must be strings")
        if option is not None and not isinstance(option, str):
            raise InvalidRequest(f"Option for {name} must be a string")
        ctx.add_extra(parse_extra(name), option)
    return ctx
