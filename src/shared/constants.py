"""
Shared constants and configuration for the logistics client.

This module defines the provider's parameter enums, the status code
tables used to classify replies and notifications, and the Config
constants shared by the payload builders, the HTTP client and the
notification handlers.
"""

from datetime import date, datetime
from enum import Enum
from typing import FrozenSet, Optional, Union


# =============================================================================
# LOGISTICS TYPES
# =============================================================================

class LogisticsType(str, Enum):
    """Top-level logistics type."""
    CVS = "CVS"      # Convenience store pickup
    HOME = "Home"    # Home delivery

    @property
    def label(self) -> str:
        return {
            LogisticsType.CVS: "Convenience store pickup",
            LogisticsType.HOME: "Home delivery",
        }[self]


class LogisticsSubType(str, Enum):
    """
    Carrier and mode combination.

    Store pickup comes in two flavours:
    - B2C: the merchant ships in bulk through the carrier's logistics centre
    - C2C: the sender drops the parcel at any store of the brand

    Home delivery is handled by a courier.
    """
    # Store pickup, B2C
    UNIMART = "UNIMART"
    FAMI = "FAMI"
    HILIFE = "HILIFE"
    UNIMART_FREEZE = "UNIMARTFREEZE"

    # Store pickup, C2C
    UNIMART_C2C = "UNIMARTC2C"
    FAMI_C2C = "FAMIC2C"
    HILIFE_C2C = "HILIFEC2C"
    OKMART_C2C = "OKMARTC2C"

    # Home delivery
    TCAT = "TCAT"
    POST = "POST"

    @property
    def label(self) -> str:
        return SUB_TYPE_LABELS[self]

    @property
    def is_c2c(self) -> bool:
        return self in C2C_SUB_TYPES

    @property
    def is_b2c(self) -> bool:
        return self in B2C_SUB_TYPES

    @property
    def is_cvs(self) -> bool:
        return self in CVS_SUB_TYPES

    @property
    def is_home(self) -> bool:
        return self in HOME_SUB_TYPES

    @property
    def logistics_type(self) -> LogisticsType:
        """The logistics type this sub-type belongs to."""
        return LogisticsType.HOME if self.is_home else LogisticsType.CVS

    @classmethod
    def lookup(cls, value: Union["LogisticsSubType", str]) -> Optional["LogisticsSubType"]:
        """Resolve a wire value (or member) to a member, None if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


SUB_TYPE_LABELS = {
    LogisticsSubType.UNIMART: "7-ELEVEN (B2C)",
    LogisticsSubType.FAMI: "FamilyMart (B2C)",
    LogisticsSubType.HILIFE: "Hi-Life (B2C)",
    LogisticsSubType.UNIMART_FREEZE: "7-ELEVEN frozen pickup (B2C)",
    LogisticsSubType.UNIMART_C2C: "7-ELEVEN (C2C)",
    LogisticsSubType.FAMI_C2C: "FamilyMart (C2C)",
    LogisticsSubType.HILIFE_C2C: "Hi-Life (C2C)",
    LogisticsSubType.OKMART_C2C: "OK Mart (C2C)",
    LogisticsSubType.TCAT: "T-CAT home delivery",
    LogisticsSubType.POST: "Chunghwa Post",
}

B2C_SUB_TYPES: FrozenSet[LogisticsSubType] = frozenset({
    LogisticsSubType.UNIMART,
    LogisticsSubType.FAMI,
    LogisticsSubType.HILIFE,
    LogisticsSubType.UNIMART_FREEZE,
})

C2C_SUB_TYPES: FrozenSet[LogisticsSubType] = frozenset({
    LogisticsSubType.UNIMART_C2C,
    LogisticsSubType.FAMI_C2C,
    LogisticsSubType.HILIFE_C2C,
    LogisticsSubType.OKMART_C2C,
})

HOME_SUB_TYPES: FrozenSet[LogisticsSubType] = frozenset({
    LogisticsSubType.TCAT,
    LogisticsSubType.POST,
})

CVS_SUB_TYPES: FrozenSet[LogisticsSubType] = B2C_SUB_TYPES | C2C_SUB_TYPES


# =============================================================================
# SHIPMENT PARAMETERS
# =============================================================================

class IsCollection(str, Enum):
    """Whether the carrier collects cash on delivery."""
    NO = "N"
    YES = "Y"

    @property
    def is_collection(self) -> bool:
        return self is IsCollection.YES


class Device(int, Enum):
    """Store map layout."""
    PC = 0
    MOBILE = 1


class Distance(str, Enum):
    """Home delivery distance band."""
    SAME = "00"      # Same city
    OTHER = "01"     # Other city
    ISLAND = "02"    # Outlying island


class Temperature(str, Enum):
    """Home delivery temperature layer."""
    ROOM = "0001"
    REFRIGERATION = "0002"
    FREEZE = "0003"


class Specification(str, Enum):
    """Home delivery parcel size (sum of the three sides)."""
    SIZE_60 = "0001"
    SIZE_90 = "0002"
    SIZE_120 = "0003"
    SIZE_150 = "0004"

    @property
    def max_size(self) -> int:
        """Largest parcel size in centimetres."""
        return {
            Specification.SIZE_60: 60,
            Specification.SIZE_90: 90,
            Specification.SIZE_120: 120,
            Specification.SIZE_150: 150,
        }[self]


class ScheduledPickupTime(str, Enum):
    """Courier pickup window."""
    MORNING = "1"        # 9~12
    AFTERNOON = "2"      # 12~17
    EVENING = "3"        # 17~20
    UNLIMITED = "4"


class ScheduledDeliveryTime(str, Enum):
    """Courier delivery window."""
    BEFORE_13 = "1"
    BETWEEN_14_18 = "2"
    UNLIMITED = "4"


class StoreType(str, Enum):
    """Store list filter."""
    PICKUP_ONLY = "01"
    PICKUP_AND_RETURN = "02"
    RETURN_ONLY = "03"


# =============================================================================
# STATUS CODES
# =============================================================================
# Synchronous API replies use "1" for success; logistics endpoints that
# accept an order for processing reply with "300".

RESPONSE_SUCCESS_CODES = ("1", "300")

# Status notifications (ServerReplyURL callbacks)
NOTIFY_SUCCESS_CODES = ("300", "2030", "2063", "2067", "2073", "3018")
NOTIFY_PROCESSING_CODES = ("2001", "2068", "3001", "3006", "3024", "3032")
NOTIFY_FAILURE_CODES = ("2065", "2066", "2072", "2074", "3019", "3020", "5001")

# Reverse logistics (returns) notifications
REVERSE_NOTIFY_SUCCESS_CODES = ("300", "2030", "2063", "2067")

# Reply body the provider expects from a ServerReplyURL
NOTIFY_ACK = "1|OK"


# =============================================================================
# CONFIGURATION
# =============================================================================

class Config:
    """Configuration constants."""

    # Provider endpoints
    STAGE_SERVER_URL = "https://logistics-stage.ecpay.com.tw"
    PRODUCTION_SERVER_URL = "https://logistics.ecpay.com.tw"
    DEFAULT_SERVER_URL = STAGE_SERVER_URL

    # Signature field
    CHECK_MAC_FIELD = "CheckMacValue"

    # Field limits (logical characters)
    MERCHANT_TRADE_NO_MAX_LENGTH = 20
    GOODS_NAME_MAX_LENGTH = 50
    PERSON_NAME_MAX_LENGTH = 10

    # Wire date formats
    TRADE_DATE_FORMAT = "%Y/%m/%d %H:%M:%S"
    DATE_FORMAT = "%Y/%m/%d"

    # HTTP
    HTTP_TIMEOUT_SECONDS = 30
    HTTP_RETRY_ATTEMPTS = 3
    HTTP_RETRY_DELAY_MS = 1000  # doubles on every retry


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def format_trade_date(value: Union[date, str, None] = None) -> str:
    """
    Format a trade date the way the provider expects it.

    Args:
        value: A datetime, an already formatted string, or None for now

    Returns:
        A string like "2024/01/31 13:05:00"
    """
    if value is None:
        value = datetime.now()
    if isinstance(value, date):
        return value.strftime(Config.TRADE_DATE_FORMAT)
    return value


def format_date(value: Union[date, str]) -> str:
    """Format a calendar date as "YYYY/MM/DD"."""
    if isinstance(value, date):
        return value.strftime(Config.DATE_FORMAT)
    return value
