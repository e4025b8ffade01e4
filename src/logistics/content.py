"""
Payload builders ("content") for logistics API operations.

Every operation the provider exposes is a Content subclass that owns:
- the request path it is posted to
- the logistics sub-types it accepts
- the fields it requires, in the order they are checked

A builder is populated through fluent setters, validated, signed once
and then frozen:

    order = (
        CreateCvsOrder("2000132", hash_key, hash_iv)
        .set_merchant_trade_no("ORDER20240131001")
        .set_goods_name("Sneakers")
        ...
    )
    signed = order.get_content()     # validated + CheckMacValue
    response = order.send()

Setters raise as soon as a value can never be valid (negative amount,
name too long, sub-type the operation cannot carry); missing fields are
reported by validate() before anything is signed.
"""

from datetime import date
from typing import Any, Dict, FrozenSet, Iterator, Mapping, Optional, Tuple, Union

import structlog

from shared.checkmac import CheckMacEncoder, mask_sensitive
from shared.constants import (
    Config,
    IsCollection,
    LogisticsSubType,
    format_trade_date,
)
from shared.errors import IncompatibleVariantError, PreconditionError, ValidationError

from .client import LogisticsClient

logger = structlog.get_logger(__name__)


# A required field is either a name or a tuple of alternatives of which
# at least one must be present.
RequiredField = Union[str, Tuple[str, ...]]


def _wire_value(value: Any) -> Any:
    """Enum members are stored as their wire value."""
    return getattr(value, "value", value)


class Content:
    """
    Base class for all operation builders.

    Subclasses declare REQUEST_PATH, ALLOWED_SUB_TYPES and REQUIRED_FIELDS
    and override _initialize() to seed their defaults.
    """

    REQUEST_PATH: str = ""
    ALLOWED_SUB_TYPES: FrozenSet[LogisticsSubType] = frozenset()
    REQUIRED_FIELDS: Tuple[RequiredField, ...] = ()

    # Whether the sub-type is written into the payload
    EMIT_SUB_TYPE = True

    def __init__(self, merchant_id: str = "", hash_key: str = "", hash_iv: str = ""):
        self._hash_key = hash_key
        self._hash_iv = hash_iv
        self._encoder: Optional[CheckMacEncoder] = None
        self._server_url = Config.DEFAULT_SERVER_URL
        self._sub_type: Optional[LogisticsSubType] = None
        self._signed: Optional[Dict[str, Any]] = None

        self._content: Dict[str, Any] = {"MerchantID": merchant_id}
        self._initialize()

    def _initialize(self):
        """Seed variant defaults."""
        pass

    def __repr__(self) -> str:
        state = "signed" if self.is_signed else "draft"
        return f"<{type(self).__name__} {state} sub_type={self.sub_type_value!r}>"

    # =========================================================================
    # Internal state
    # =========================================================================

    @property
    def is_signed(self) -> bool:
        return self._signed is not None

    def _check_mutable(self):
        if self._signed is not None:
            raise PreconditionError(
                f"{type(self).__name__} has already been signed; build a new instance"
            )

    def _set(self, key: str, value: Any) -> "Content":
        self._check_mutable()
        self._content[key] = _wire_value(value)
        return self

    def _set_limited(self, key: str, value: str, max_length: Optional[int]) -> "Content":
        # Limits count characters, not bytes
        if max_length is not None and len(value) > max_length:
            raise ValidationError.too_long(key, max_length)
        return self._set(key, value)

    def _set_amount(self, key: str, amount: int) -> "Content":
        if amount < 0:
            raise ValidationError.negative(key)
        return self._set(key, int(amount))

    def _set_joined(self, key: str, values) -> "Content":
        return self._set(key, ",".join(str(v) for v in values))

    def get(self, key: str, default: Any = None) -> Any:
        """Current (unsigned) value of a payload field."""
        return self._content.get(key, default)

    # =========================================================================
    # Common setters
    # =========================================================================

    def set_merchant_id(self, merchant_id: str) -> "Content":
        return self._set("MerchantID", merchant_id)

    def set_hash_key(self, hash_key: str) -> "Content":
        self._check_mutable()
        self._hash_key = hash_key
        return self

    def set_hash_iv(self, hash_iv: str) -> "Content":
        self._check_mutable()
        self._hash_iv = hash_iv
        return self

    def set_platform_id(self, platform_id: str) -> "Content":
        """Set PlatformID (platform merchants only). Empty removes it."""
        self._check_mutable()
        if platform_id:
            self._content["PlatformID"] = platform_id
        else:
            self._content.pop("PlatformID", None)
        return self

    def set_merchant_trade_no(self, trade_no: str) -> "Content":
        return self._set_limited("MerchantTradeNo", trade_no, Config.MERCHANT_TRADE_NO_MAX_LENGTH)

    def set_merchant_trade_date(self, value: Union[date, str]) -> "Content":
        return self._set("MerchantTradeDate", format_trade_date(value))

    def set_server_reply_url(self, url: str) -> "Content":
        return self._set("ServerReplyURL", url)

    def set_client_reply_url(self, url: str) -> "Content":
        return self._set("ClientReplyURL", url)

    def set_remark(self, remark: str) -> "Content":
        return self._set("Remark", remark)

    def set_server_url(self, url: str) -> "Content":
        self._check_mutable()
        self._server_url = url.rstrip("/")
        return self

    def set_encoder(self, encoder: CheckMacEncoder) -> "Content":
        self._check_mutable()
        self._encoder = encoder
        return self

    def set_logistics_sub_type(self, sub_type: Union[LogisticsSubType, str]) -> "Content":
        """
        Assign the carrier sub-type.

        Raises:
            IncompatibleVariantError if this operation cannot carry it
        """
        member = LogisticsSubType.lookup(sub_type)
        if member is None or member not in self.ALLOWED_SUB_TYPES:
            raise IncompatibleVariantError(
                "LogisticsSubType",
                _wire_value(sub_type),
                allowed=[s.value for s in self.ALLOWED_SUB_TYPES],
                operation=type(self).__name__,
            )

        self._check_mutable()
        self._sub_type = member
        if self.EMIT_SUB_TYPE:
            self._content["LogisticsSubType"] = member.value
        return self

    # =========================================================================
    # Introspection
    # =========================================================================

    @property
    def sub_type(self) -> Optional[LogisticsSubType]:
        return self._sub_type

    @property
    def sub_type_value(self) -> Optional[str]:
        return self._sub_type.value if self._sub_type else None

    @property
    def server_url(self) -> str:
        return self._server_url

    @property
    def request_path(self) -> str:
        return self.REQUEST_PATH

    @property
    def url(self) -> str:
        return self._server_url + self.request_path

    @property
    def encoder(self) -> CheckMacEncoder:
        """Encoder for this builder; raises PreconditionError without secrets."""
        if self._encoder is None:
            self._encoder = CheckMacEncoder(self._hash_key, self._hash_iv)
        return self._encoder

    @classmethod
    def requires(cls, field: str) -> bool:
        """Whether the field appears in this operation's required set."""
        for required in cls.REQUIRED_FIELDS:
            names = required if isinstance(required, tuple) else (required,)
            if field in names:
                return True
        return False

    # =========================================================================
    # Validation
    # =========================================================================

    def _is_blank(self, key: str) -> bool:
        value = self._content.get(key)
        return value is None or value == ""

    def _missing(self, required: RequiredField) -> Optional[ValidationError]:
        if isinstance(required, tuple):
            if all(self._is_blank(name) for name in required):
                return ValidationError(required[0], alternatives=required)
            return None
        if self._is_blank(required):
            return ValidationError(required)
        return None

    def _missing_all(self, *fields: RequiredField) -> Iterator[ValidationError]:
        for required in fields:
            violation = self._missing(required)
            if violation is not None:
                yield violation

    def _violations(self) -> Iterator[ValidationError]:
        """Yield every violation in check order."""
        yield from self._missing_all("MerchantID", *self.REQUIRED_FIELDS)

    def find_violation(self) -> Optional[ValidationError]:
        """First violation, or None when the payload is complete."""
        return next(self._violations(), None)

    def validate(self) -> "Content":
        """Raise the first ValidationError, if any."""
        violation = self.find_violation()
        if violation is not None:
            raise violation
        return self

    def is_valid(self) -> bool:
        return self.find_violation() is None

    # =========================================================================
    # Output
    # =========================================================================

    def get_payload(self) -> Dict[str, Any]:
        """Validated, unsigned copy of the payload."""
        self.validate()
        return dict(self._content)

    def get_content(self) -> Dict[str, Any]:
        """
        Validated and signed payload.

        The first call signs and freezes the builder; later calls return
        the same signed payload.
        """
        if self._signed is None:
            payload = self.get_payload()
            self._signed = self.encoder.encode_payload(payload)
            logger.debug(
                "logistics.content.signed",
                operation=type(self).__name__,
                payload=mask_sensitive(self._signed),
            )
        return dict(self._signed)

    def to_form(self) -> Dict[str, Any]:
        """Signed payload plus the URL a browser form should post it to."""
        return {"action": self.url, "fields": self.get_content()}

    def send(self, client=None):
        """
        Sign the payload and post it to the provider.

        Args:
            client: LogisticsClient to use (default: one for this server URL)

        Returns:
            Response wrapping the provider's reply
        """
        content = self.get_content()
        client = client or LogisticsClient(self._server_url)
        return client.post(self.request_path, content, encoder=self.encoder)


class RoutedContent(Content):
    """Content whose request path depends on the assigned sub-type."""

    ROUTES: Mapping[LogisticsSubType, str] = {}

    @property
    def request_path(self) -> str:
        if self._sub_type is None:
            raise ValidationError("LogisticsSubType")
        return self.ROUTES[self._sub_type]


# =============================================================================
# Shared shipment fields
# =============================================================================

class ShipmentFields:
    """Goods, sender and receiver setters shared by shipment operations."""

    # Sender/receiver name limit; None leaves it to the provider
    PERSON_NAME_MAX_LENGTH: Optional[int] = None

    def set_all_pay_logistics_id(self, logistics_id: str):
        return self._set("AllPayLogisticsID", logistics_id)

    def set_goods_name(self, name: str):
        return self._set_limited("GoodsName", name, Config.GOODS_NAME_MAX_LENGTH)

    def set_goods_amount(self, amount: int):
        return self._set_amount("GoodsAmount", amount)

    def set_collection_amount(self, amount: int):
        return self._set_amount("CollectionAmount", amount)

    def set_is_collection(self, value: Union[IsCollection, str]):
        return self._set("IsCollection", IsCollection(_wire_value(value)))

    def set_service_type(self, service_type: str):
        return self._set("ServiceType", service_type)

    def set_sender_name(self, name: str):
        return self._set_limited("SenderName", name, self.PERSON_NAME_MAX_LENGTH)

    def set_sender_phone(self, phone: str):
        return self._set("SenderPhone", phone)

    def set_sender_cell_phone(self, cell_phone: str):
        return self._set("SenderCellPhone", cell_phone)

    def set_sender_zip_code(self, zip_code: str):
        return self._set("SenderZipCode", zip_code)

    def set_sender_address(self, address: str):
        return self._set("SenderAddress", address)

    def set_receiver_name(self, name: str):
        return self._set_limited("ReceiverName", name, self.PERSON_NAME_MAX_LENGTH)

    def set_receiver_phone(self, phone: str):
        return self._set("ReceiverPhone", phone)

    def set_receiver_cell_phone(self, cell_phone: str):
        return self._set("ReceiverCellPhone", cell_phone)

    def set_receiver_zip_code(self, zip_code: str):
        return self._set("ReceiverZipCode", zip_code)

    def set_receiver_address(self, address: str):
        return self._set("ReceiverAddress", address)

    def set_receiver_email(self, email: str):
        return self._set("ReceiverEmail", email)

    def set_receiver_store_id(self, store_id: str):
        return self._set("ReceiverStoreID", store_id)

    def with_collection(self, amount: int = 0):
        """Enable cash on delivery; amount defaults to GoodsAmount."""
        self.set_is_collection(IsCollection.YES)
        if amount > 0:
            self.set_collection_amount(amount)
        return self

    def without_collection(self):
        return self.set_is_collection(IsCollection.NO)

    def set_sender(self, name: str, cell_phone: str = "", phone: str = ""):
        self.set_sender_name(name)
        if cell_phone:
            self.set_sender_cell_phone(cell_phone)
        if phone:
            self.set_sender_phone(phone)
        return self

    def set_receiver(self, name: str, cell_phone: str = "", phone: str = ""):
        self.set_receiver_name(name)
        if cell_phone:
            self.set_receiver_cell_phone(cell_phone)
        if phone:
            self.set_receiver_phone(phone)
        return self
