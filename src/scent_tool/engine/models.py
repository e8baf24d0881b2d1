"""
Data models for the pricing engine.

Uses frozen dataclasses so derived price sets compare by value and can be
shared between callers without copying.
"""
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Variant:
    """A labelled unit price read from a product record (e.g. "3ml" → 500)."""
    label: str
    unit_price: Any = None

    @classmethod
    def from_mapping(cls, data: Mapping) -> 'Variant':
        """Build a Variant from a stored record ({size, price}) or API payload."""
        label = data.get('label', data.get('size', ''))
        if 'unit_price' in data:
            price = data['unit_price']
        elif 'unitPrice' in data:
            price = data['unitPrice']
        else:
            price = data.get('price')
        return cls(label='' if label is None else str(label), unit_price=price)


@dataclass(frozen=True)
class SlotRule:
    """
    One derived output slot of the markup schedule.

    The slot price is ``round(anchor_price / divisor * multiplier + offset)``.
    A divisor of 1 uses the anchor price whole.
    """
    label: str
    anchor: str
    divisor: float = 1
    multiplier: float = 1
    offset: float = 0


@dataclass(frozen=True)
class PriceSlot:
    """A derived slot: a whole-currency price, or None when unavailable."""
    label: str
    price: Optional[int] = None

    @property
    def available(self) -> bool:
        return self.price is not None


@dataclass(frozen=True)
class DerivedPriceSet:
    """Ordered, immutable set of derived retail prices for one product."""
    slots: tuple[PriceSlot, ...] = field(default_factory=tuple)

    @classmethod
    def no_data(cls, labels) -> 'DerivedPriceSet':
        """The result where every slot is unavailable."""
        return cls(slots=tuple(PriceSlot(label=label) for label in labels))

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(slot.label for slot in self.slots)

    @property
    def has_data(self) -> bool:
        """True when at least one slot carries a price."""
        return any(slot.available for slot in self.slots)

    def get(self, label: str) -> Optional[int]:
        for slot in self.slots:
            if slot.label == label:
                return slot.price
        raise KeyError(label)

    def as_dict(self) -> dict[str, Optional[int]]:
        """Slot label → price, in schedule order."""
        return {slot.label: slot.price for slot in self.slots}
