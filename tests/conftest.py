import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from scent_tool.config.settings import Settings
from scent_tool.engine import PricingEngine
from scent_tool.services.records_service import ShopStores


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Settings pointing at an empty temporary data directory."""
    for var in ('SCENT_TOOL_DATA_DIR', 'SCENT_TOOL_MARKUP_SCHEDULE', 'SCENT_TOOL_SHOP_NAME'):
        monkeypatch.delenv(var, raising=False)
    return Settings.load(project_root=tmp_path, data_dir=tmp_path / 'data')


@pytest.fixture
def engine(settings):
    return PricingEngine(settings)


@pytest.fixture
def stores(settings):
    return ShopStores.from_settings(settings)


@pytest.fixture
def attar_payload():
    """A product with both anchor sizes priced."""
    return {
        'name': 'Oud Al Khaleeji',
        'description': 'Rich oud',
        'variants': [
            {'size': '3ml', 'price': '500'},
            {'size': '6ml', 'price': '950'},
            {'size': '12ml ( Tola )', 'price': '1800'},
        ],
    }
