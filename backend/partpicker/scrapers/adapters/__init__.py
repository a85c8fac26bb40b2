"""Retailer-specific adapter implementations.

Each adapter subclasses BaseRetailerAdapter and only declares data:
category URLs, the search URL template and CSS selectors.
"""

from .startech import StartechAdapter
from .techland import TechlandAdapter
from .ultratech import UltraTechAdapter
from .potakait import PotakaITAdapter
from .pchouse import PCHouseAdapter
from .skyland import SkylandAdapter

__all__ = [
    "StartechAdapter",
    "TechlandAdapter",
    "UltraTechAdapter",
    "PotakaITAdapter",
    "PCHouseAdapter",
    "SkylandAdapter",
]
