"""Logistics package."""

from .client import LogisticsClient

from .response import Response

from .content import Content, RoutedContent, ShipmentFields

from .cvs import (
    CreateCvsOrder,
    UpdateCvsOrder,
    CancelCvsOrder,
    ReturnCvsOrder,
)

from .home import (
    CreateHomeOrder,
    ReturnHomeOrder,
)

from .store_map import OpenStoreMap

from .queries import (
    QueryLogisticsOrder,
    GetStoreList,
)

from .printing import (
    PrintTradeDocument,
    PrintCvsDocument,
)

from .catalog import (
    OperationCatalog,
    DEFAULT_OPERATIONS,
    settings_initializer,
)

__all__ = [
    # Transport
    "LogisticsClient",
    "Response",
    # Builders
    "Content",
    "RoutedContent",
    "ShipmentFields",
    "CreateCvsOrder",
    "UpdateCvsOrder",
    "CancelCvsOrder",
    "ReturnCvsOrder",
    "CreateHomeOrder",
    "ReturnHomeOrder",
    "OpenStoreMap",
    "QueryLogisticsOrder",
    "GetStoreList",
    "PrintTradeDocument",
    "PrintCvsDocument",
    # Catalog
    "OperationCatalog",
    "DEFAULT_OPERATIONS",
    "settings_initializer",
]
