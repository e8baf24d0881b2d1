"""Engine subpackage - perfume price derivation from attar price points."""
from .pricing_engine import PricingEngine, derive_prices
from .models import Variant, SlotRule, PriceSlot, DerivedPriceSet
from .schedule import MarkupSchedule, DEFAULT_SCHEDULE

__all__ = [
    'PricingEngine', 'derive_prices', 'Variant', 'SlotRule', 'PriceSlot',
    'DerivedPriceSet', 'MarkupSchedule', 'DEFAULT_SCHEDULE',
]
