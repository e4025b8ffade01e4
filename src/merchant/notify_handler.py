"""
Logistics Status Notification Handler

The provider posts shipment status changes to the ServerReplyURL given
when the order was created. This module shows how a merchant backend
should handle them.

Key principles:
1. ALWAYS verify the CheckMacValue first
2. Reply "1|OK" once a notification is accepted, or the provider
   keeps re-sending it
3. Classify by RtnCode: success, still processing, failed, or unknown
4. Handler errors must not stop the acknowledgement
"""

import copy
from typing import Any, Callable, Dict, Iterable, List, Mapping, Tuple

import structlog

from shared.checkmac import CheckMacEncoder
from shared.constants import (
    NOTIFY_ACK,
    NOTIFY_FAILURE_CODES,
    NOTIFY_PROCESSING_CODES,
    NOTIFY_SUCCESS_CODES,
    REVERSE_NOTIFY_SUCCESS_CODES,
)
from shared.errors import SignatureMismatch

logger = structlog.get_logger(__name__)


SUCCESS = "success"
PROCESSING = "processing"
FAILURE = "failure"
UNCLASSIFIED = "unclassified"

BUCKETS = (SUCCESS, PROCESSING, FAILURE, UNCLASSIFIED)


class LogisticsNotify:
    """
    Handler for shipment status notifications.

    Usage:
        notify = LogisticsNotify(hash_key="...", hash_iv="...")

        @notify.on("success")
        def delivered(notification):
            mark_delivered(notification.merchant_trade_no)

        # In your web framework route:
        def logistics_callback(request):
            status, body = notify.reply(request.form.to_dict())
            return Response(body, status=status)
    """

    SUCCESS_CODES: Tuple[str, ...] = NOTIFY_SUCCESS_CODES
    PROCESSING_CODES: Tuple[str, ...] = NOTIFY_PROCESSING_CODES
    FAILURE_CODES: Tuple[str, ...] = NOTIFY_FAILURE_CODES

    def __init__(self, hash_key: str, hash_iv: str):
        """
        Initialize the handler.

        Args:
            hash_key: HashKey issued by the provider
            hash_iv: HashIV issued by the provider
        """
        self.encoder = CheckMacEncoder(hash_key, hash_iv)
        self._handlers: Dict[str, List[Callable]] = {}
        self._data: Dict[str, Any] = {}
        self._verified = False

    # =========================================================================
    # Verification
    # =========================================================================

    def verify(self, data: Mapping[str, Any]) -> bool:
        """
        Store the notification and check its CheckMacValue.

        Returns:
            True if the signature matches
        """
        self._data = dict(data)
        self._verified = self.encoder.verify_response(self._data)
        return self._verified

    def verify_or_fail(self, data: Mapping[str, Any]) -> "LogisticsNotify":
        """
        Verify and return self.

        Raises:
            SignatureMismatch if the CheckMacValue is missing or wrong
        """
        if not self.verify(data):
            raise SignatureMismatch(http_status=400)
        return self

    def is_verified(self) -> bool:
        return self._verified

    # =========================================================================
    # Classification
    # =========================================================================

    def is_success(self) -> bool:
        return self.rtn_code in self.SUCCESS_CODES

    def is_processing(self) -> bool:
        return self.rtn_code in self.PROCESSING_CODES

    def is_failure(self) -> bool:
        return self.rtn_code in self.FAILURE_CODES

    def is_success_with_codes(self, codes: Iterable[str]) -> bool:
        """Success check against a caller-supplied code list."""
        return self.rtn_code in {str(code) for code in codes}

    def classify(self) -> str:
        """Bucket name for the current RtnCode."""
        if self.is_success():
            return SUCCESS
        if self.is_processing():
            return PROCESSING
        if self.is_failure():
            return FAILURE
        return UNCLASSIFIED

    def success_response(self) -> str:
        """Body the provider expects once a notification is accepted."""
        return NOTIFY_ACK

    # =========================================================================
    # Dispatch
    # =========================================================================

    def on(self, bucket: str):
        """
        Decorator to register a handler for a status bucket.

        Usage:
            @notify.on("failure")
            def handle_failure(notification):
                alert(notification.rtn_msg)
        """
        def decorator(func: Callable[["LogisticsNotify"], None]):
            self.register_handler(bucket, func)
            return func
        return decorator

    def register_handler(self, bucket: str, handler: Callable):
        """Register a handler function for a status bucket."""
        if bucket not in BUCKETS:
            raise ValueError(f"Unknown bucket {bucket!r}, expected one of {', '.join(BUCKETS)}")
        self._handlers.setdefault(bucket, []).append(handler)

    def handle(self, data: Mapping[str, Any]) -> "LogisticsNotify":
        """
        Verify a notification and call the handlers for its bucket.

        Each call works on its own copy of the handler, so one instance
        can serve concurrent requests.

        Returns:
            The verified notification

        Raises:
            SignatureMismatch if the CheckMacValue is missing or wrong
        """
        notification = copy.copy(self)

        if not notification.verify(data):
            logger.warning(
                "logistics.notify.rejected",
                handler=type(self).__name__,
                merchant_trade_no=notification.merchant_trade_no,
                rtn_code=notification.rtn_code,
            )
            raise SignatureMismatch(http_status=400)

        bucket = notification.classify()
        logger.info(
            "logistics.notify.accepted",
            handler=type(self).__name__,
            bucket=bucket,
            merchant_trade_no=notification.merchant_trade_no,
            all_pay_logistics_id=notification.all_pay_logistics_id,
            rtn_code=notification.rtn_code,
        )

        for handler in self._handlers.get(bucket, []):
            try:
                handler(notification)
            except Exception:
                # Logged, not raised: the provider still gets its 1|OK
                logger.exception(
                    "logistics.notify.handler_failed",
                    bucket=bucket,
                    handler=getattr(handler, "__name__", repr(handler)),
                    merchant_trade_no=notification.merchant_trade_no,
                )

        return notification

    def reply(self, data: Mapping[str, Any]) -> Tuple[int, str]:
        """
        Framework-neutral endpoint body.

        Returns:
            (200, "1|OK") when accepted, (400, reason) on a bad signature
        """
        try:
            self.handle(data)
        except SignatureMismatch as e:
            return 400, e.message
        return 200, self.success_response()

    # =========================================================================
    # Accessors
    # =========================================================================

    def _str(self, key: str) -> str:
        value = self._data.get(key)
        return "" if value is None else str(value)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    @property
    def rtn_code(self) -> str:
        return self._str("RtnCode")

    @property
    def rtn_msg(self) -> str:
        return self._str("RtnMsg")

    @property
    def all_pay_logistics_id(self) -> str:
        return self._str("AllPayLogisticsID")

    @property
    def merchant_trade_no(self) -> str:
        return self._str("MerchantTradeNo")

    @property
    def merchant_id(self) -> str:
        return self._str("MerchantID")

    @property
    def logistics_type(self) -> str:
        return self._str("LogisticsType")

    @property
    def logistics_sub_type(self) -> str:
        return self._str("LogisticsSubType")

    @property
    def goods_amount(self) -> int:
        try:
            return int(self._data.get("GoodsAmount") or 0)
        except (TypeError, ValueError):
            return 0

    @property
    def update_status_date(self) -> str:
        return self._str("UpdateStatusDate")

    @property
    def receiver_name(self) -> str:
        return self._str("ReceiverName")

    @property
    def receiver_phone(self) -> str:
        return self._str("ReceiverPhone")

    @property
    def receiver_cell_phone(self) -> str:
        return self._str("ReceiverCellPhone")

    @property
    def receiver_email(self) -> str:
        return self._str("ReceiverEmail")

    @property
    def receiver_address(self) -> str:
        return self._str("ReceiverAddress")

    @property
    def cvs_payment_no(self) -> str:
        return self._str("CVSPaymentNo")

    @property
    def cvs_validation_no(self) -> str:
        return self._str("CVSValidationNo")

    @property
    def booking_note(self) -> str:
        return self._str("BookingNote")


class ReverseLogisticsNotify(LogisticsNotify):
    """
    Handler for return shipment notifications.

    Returns report fewer success codes than forward shipments and carry
    the id of the shipment being returned.
    """

    SUCCESS_CODES = REVERSE_NOTIFY_SUCCESS_CODES

    @property
    def origin_all_pay_logistics_id(self) -> str:
        return self._str("OriginAllPayLogisticsID")


# =============================================================================
# Flask integration example
# =============================================================================

FLASK_EXAMPLE = '''
# Flask ServerReplyURL endpoint example
from flask import Flask, request
from merchant import LogisticsNotify

app = Flask(__name__)
notify = LogisticsNotify(hash_key="...", hash_iv="...")

@notify.on("success")
def on_delivered(notification):
    Order.mark_delivered(notification.merchant_trade_no)

@notify.on("failure")
def on_failed(notification):
    Order.flag_shipping_problem(notification.merchant_trade_no, notification.rtn_msg)

@app.route("/logistics/notify", methods=["POST"])
def logistics_notify():
    status, body = notify.reply(request.form.to_dict())
    return body, status, {"Content-Type": "text/plain"}
'''


# =============================================================================
# Demo
# =============================================================================

def demo_notify_handler():
    """Demonstrate notification handling."""
    print("=" * 60)
    print("LOGISTICS NOTIFICATION DEMO")
    print("=" * 60)

    hash_key, hash_iv = "5294y06JbISpM5x9", "v77hoKGq4kWxNNIS"
    notify = LogisticsNotify(hash_key, hash_iv)

    @notify.on("success")
    def on_success(notification):
        print(f"   📦 Shipment {notification.all_pay_logistics_id} update: {notification.rtn_msg}")

    @notify.on("failure")
    def on_failure(notification):
        print(f"   ❌ Shipment {notification.all_pay_logistics_id} failed: {notification.rtn_msg}")

    # Sign the way the provider does
    provider = CheckMacEncoder(hash_key, hash_iv)
    data = provider.encode_payload({
        "MerchantID": "2000132",
        "MerchantTradeNo": "DEMO0001",
        "RtnCode": "2067",
        "RtnMsg": "Picked up by customer",
        "AllPayLogisticsID": "1718546",
        "LogisticsType": "CVS",
        "LogisticsSubType": "FAMIC2C",
        "GoodsAmount": "500",
    })

    print("\n1. Valid notification:")
    status, body = notify.reply(data)
    print(f"   Reply: {status} {body}")

    print("\n2. Tampered notification:")
    status, body = notify.reply(dict(data, GoodsAmount="1"))
    print(f"   Reply: {status} {body}")
