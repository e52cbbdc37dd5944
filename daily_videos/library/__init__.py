"""Media library access and per-day indexing."""

from .gateway import MediaLibraryGateway, JsonLibraryGateway, PhotoKitGateway, create_gateway
from .index import MediaIndex, group_by_day, select_default_representative

__all__ = [
    'MediaLibraryGateway',
    'JsonLibraryGateway',
    'PhotoKitGateway',
    'create_gateway',
    'MediaIndex',
    'group_by_day',
    'select_default_representative'
]
