"""Shared package initialization."""

from .constants import (
    LogisticsType,
    LogisticsSubType,
    IsCollection,
    Device,
    Distance,
    Temperature,
    Specification,
    ScheduledPickupTime,
    ScheduledDeliveryTime,
    StoreType,
    B2C_SUB_TYPES,
    C2C_SUB_TYPES,
    CVS_SUB_TYPES,
    HOME_SUB_TYPES,
    NOTIFY_ACK,
    Config,
)

from .checkmac import (
    CheckMacEncoder,
    mask_sensitive,
)

from .config import (
    Credentials,
    LogisticsSettings,
)

from .errors import (
    LogisticsError,
    PreconditionError,
    ValidationError,
    IncompatibleVariantError,
    SignatureMismatch,
    ParseError,
    TransportError,
    UnknownOperationError,
)

__all__ = [
    # Constants
    "LogisticsType",
    "LogisticsSubType",
    "IsCollection",
    "Device",
    "Distance",
    "Temperature",
    "Specification",
    "ScheduledPickupTime",
    "ScheduledDeliveryTime",
    "StoreType",
    "B2C_SUB_TYPES",
    "C2C_SUB_TYPES",
    "CVS_SUB_TYPES",
    "HOME_SUB_TYPES",
    "NOTIFY_ACK",
    "Config",
    # Signing
    "CheckMacEncoder",
    "mask_sensitive",
    # Configuration
    "Credentials",
    "LogisticsSettings",
    # Errors
    "LogisticsError",
    "PreconditionError",
    "ValidationError",
    "IncompatibleVariantError",
    "SignatureMismatch",
    "ParseError",
    "TransportError",
    "UnknownOperationError",
]
