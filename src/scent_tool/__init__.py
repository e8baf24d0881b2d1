"""
Scent Tool Package

Inventory, order and price-list management for an attar and perfume shop.
Derives perfume bottle prices from attar price points (3ml / 12ml Tola)
using a configurable markup schedule.
"""

__version__ = "1.0.0"
