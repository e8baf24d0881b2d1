"""
Shared API state - one settings/engine/store set per process.

Routers take these through ``Depends`` so tests can swap them with
``app.dependency_overrides``.
"""
from dataclasses import dataclass
from typing import Optional

from ..config.settings import get_settings, Settings
from ..engine import PricingEngine
from ..services.records_service import ShopStores


@dataclass
class AppState:
    settings: Settings
    engine: PricingEngine
    stores: ShopStores

    @classmethod
    def from_settings(cls, settings: Settings) -> 'AppState':
        return cls(
            settings=settings,
            engine=PricingEngine(settings),
            stores=ShopStores.from_settings(settings),
        )


_state: Optional[AppState] = None


def get_state() -> AppState:
    """Get the process-wide state, building it on first use."""
    global _state
    if _state is None:
        _state = AppState.from_settings(get_settings())
    return _state


def reload_state() -> AppState:
    """Rebuild state, e.g. after the markup schedule file changed."""
    global _state
    _state = None
    return get_state()
