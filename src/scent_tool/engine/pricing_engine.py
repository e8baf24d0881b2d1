"""
Pricing Engine - derives perfume bottle prices from attar price points.

Resolution per slot:
1. Find the first variant whose label matches the slot's anchor
   (trimmed, case-insensitive)
2. Coerce that variant's price to a number; non-numeric means no anchor
3. price = round(anchor_price / divisor * multiplier + offset)
4. Missing anchor → slot is unavailable (None), never zero

The functions here hold no state and do no I/O, so one engine can serve
every product row of an export.
"""
import math
from decimal import Decimal
from numbers import Number
from typing import Iterable, Mapping, Optional, Union

from ..config.settings import get_settings, Settings
from .models import Variant, PriceSlot, DerivedPriceSet
from .schedule import MarkupSchedule, DEFAULT_SCHEDULE


VariantLike = Union[Variant, Mapping]


def normalize_label(label) -> str:
    """Normalize a size label for matching: trimmed and lower-cased."""
    return str(label).strip().lower()


def coerce_price(value) -> Optional[float]:
    """
    Coerce a stored price to a finite number.

    Returns None for missing, empty, boolean, non-numeric and non-finite
    values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (Number, Decimal)):
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
    else:
        text = str(value).strip()
        # float() allows digit separators ("1_000"), which are not prices
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def round_half_up(value: float) -> int:
    """Round to the nearest whole currency unit, halves rounding up."""
    return int(math.floor(value + 0.5))


def _as_variant(item: VariantLike) -> Variant:
    if isinstance(item, Variant):
        return item
    return Variant.from_mapping(item)


def find_anchor_price(variants: list[Variant], anchor: str) -> Optional[float]:
    """Price of the first variant labelled ``anchor``; None if absent or non-numeric."""
    key = normalize_label(anchor)
    for variant in variants:
        if normalize_label(variant.label) == key:
            return coerce_price(variant.unit_price)
    return None


def derive_prices(
    variants: Optional[Iterable[VariantLike]],
    schedule: MarkupSchedule = DEFAULT_SCHEDULE,
) -> DerivedPriceSet:
    """
    Derive the retail price set for one product.

    Args:
        variants: Labelled unit prices (Variant objects or {size, price} mappings)
        schedule: Slot rules to apply

    Returns:
        DerivedPriceSet; every slot is None when nothing could be derived
    """
    items = [_as_variant(v) for v in (variants or ())]
    if not items:
        return DerivedPriceSet.no_data(schedule.labels)

    anchor_prices = {anchor: find_anchor_price(items, anchor) for anchor in schedule.anchors}

    slots = []
    for rule in schedule.rules:
        base = anchor_prices[rule.anchor]
        if base is None:
            slots.append(PriceSlot(label=rule.label))
            continue
        per_unit = base / rule.divisor
        slots.append(PriceSlot(
            label=rule.label,
            price=round_half_up(per_unit * rule.multiplier + rule.offset),
        ))
    return DerivedPriceSet(slots=tuple(slots))


class PricingEngine:
    """
    Applies a markup schedule to product variants.

    The schedule comes from, in order:
    1. The ``schedule`` argument
    2. The CSV named by ``settings.markup_schedule``
    3. DEFAULT_SCHEDULE
    """

    def __init__(self, settings: Optional[Settings] = None, schedule: Optional[MarkupSchedule] = None):
        self.settings = settings or get_settings()
        if schedule is not None:
            self.schedule = schedule
        elif self.settings.markup_schedule and self.settings.markup_schedule.exists():
            self.schedule = MarkupSchedule.from_csv(self.settings.markup_schedule)
        else:
            self.schedule = DEFAULT_SCHEDULE

    @property
    def slot_labels(self) -> tuple[str, ...]:
        return self.schedule.labels

    def derive(self, variants: Optional[Iterable[VariantLike]]) -> DerivedPriceSet:
        """Derive prices for one product's variants."""
        return derive_prices(variants, self.schedule)

    def derive_for_product(self, product) -> DerivedPriceSet:
        """Derive prices for a product record (anything with ``.variants``)."""
        return self.derive(getattr(product, 'variants', None))
