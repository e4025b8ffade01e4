"""
Provider reply parsing.

The logistics API answers in one of two shapes depending on the
endpoint:

    RtnCode=1&RtnMsg=OK&AllPayLogisticsID=123456&CheckMacValue=...
    {"RtnCode": 1, "RtnMsg": "OK", ...}

Response tries form encoding first, then a JSON object. A body that is
neither is not an exception: the parse error is kept on the response so
callers can log the raw body before deciding what to do.
"""

import json
from typing import Any, Dict, Optional
from urllib.parse import unquote_plus

from shared.checkmac import CheckMacEncoder
from shared.constants import RESPONSE_SUCCESS_CODES
from shared.errors import ParseError, SignatureMismatch


EMPTY_BODY_MESSAGE = "Response body is empty"
UNPARSEABLE_BODY_MESSAGE = "Response body is neither form-encoded nor a JSON object"


def parse_form(body: str) -> Dict[str, str]:
    """
    Decode a form-encoded body.

    Pairs without "=" are ignored. A decode whose keys look like JSON
    fragments is discarded so JSON bodies fall through to the JSON parser.
    """
    data: Dict[str, str] = {}
    for pair in body.split("&"):
        if "=" not in pair:
            continue
        key, value = pair.split("=", 1)
        key = unquote_plus(key).strip()
        if not key:
            continue
        data[key] = unquote_plus(value)

    if any(key.startswith(("{", "[")) for key in data):
        return {}
    return data


def parse_json(body: str) -> Dict[str, Any]:
    """Decode a JSON object body; anything else decodes to nothing."""
    try:
        decoded = json.loads(body)
    except ValueError:
        return {}
    return decoded if isinstance(decoded, dict) else {}


class Response:
    """
    Parsed provider reply.

    Usage:
        response = Response(body, encoder)

        if response.is_success():
            save(response.all_pay_logistics_id)
        else:
            log(response.rtn_code, response.rtn_msg)
    """

    def __init__(self, body: str, encoder: Optional[CheckMacEncoder] = None, http_status: int = 200):
        self._raw_body = body
        self._encoder = encoder
        self.http_status = http_status
        self._verified = False
        self.parse_error: Optional[ParseError] = None
        self._data: Dict[str, Any] = self._parse(body)

    def _parse(self, body: str) -> Dict[str, Any]:
        text = body.strip() if body else ""
        if not text:
            self.parse_error = ParseError(EMPTY_BODY_MESSAGE)
            return {}

        data = parse_form(text) or parse_json(text)
        if not data:
            self.parse_error = ParseError(UNPARSEABLE_BODY_MESSAGE)
        return data

    def __repr__(self) -> str:
        return f"<Response rtn_code={self.rtn_code!r} success={self.is_success()}>"

    # =========================================================================
    # Parse state
    # =========================================================================

    def has_parse_error(self) -> bool:
        return self.parse_error is not None

    def raise_for_parse_error(self) -> "Response":
        if self.parse_error is not None:
            raise self.parse_error
        return self

    # =========================================================================
    # Verification
    # =========================================================================

    def verify(self) -> bool:
        """Check CheckMacValue; False when no encoder was supplied."""
        if self._encoder is None:
            return False
        self._verified = self._encoder.verify_response(self._data)
        return self._verified

    def verify_or_fail(self) -> "Response":
        """
        Verify and return self.

        Raises:
            SignatureMismatch if an encoder is set and verification fails
        """
        if self._encoder is not None and not self.verify():
            raise SignatureMismatch(http_status=self.http_status)
        return self

    def is_verified(self) -> bool:
        return self._verified

    # =========================================================================
    # Classification
    # =========================================================================

    def is_success(self) -> bool:
        return self.parse_error is None and self.rtn_code in RESPONSE_SUCCESS_CODES

    # =========================================================================
    # Accessors
    # =========================================================================

    def _str(self, *keys: str) -> str:
        for key in keys:
            value = self._data.get(key)
            if value is not None:
                return str(value)
        return ""

    @property
    def rtn_code(self) -> str:
        return self._str("RtnCode")

    @property
    def rtn_msg(self) -> str:
        return self._str("RtnMsg", "RtnMsgE")

    @property
    def all_pay_logistics_id(self) -> str:
        # Create replies are prefixed with "1|" on the first key
        return self._str("AllPayLogisticsID", "1|AllPayLogisticsID")

    @property
    def booking_note(self) -> str:
        return self._str("BookingNote")

    @property
    def cvs_store_id(self) -> str:
        return self._str("CVSStoreID")

    @property
    def cvs_store_name(self) -> str:
        return self._str("CVSStoreName")

    @property
    def cvs_address(self) -> str:
        return self._str("CVSAddress")

    @property
    def cvs_telephone(self) -> str:
        return self._str("CVSTelephone")

    @property
    def cvs_payment_no(self) -> str:
        return self._str("CVSPaymentNo")

    @property
    def cvs_validation_no(self) -> str:
        return self._str("CVSValidationNo")

    @property
    def print_url(self) -> str:
        return self._str("PrintURL")

    @property
    def raw_body(self) -> str:
        return self._raw_body

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)


# =============================================================================
# Demo
# =============================================================================

def demo_response():
    """Parse the reply bodies the provider sends back."""
    print("=" * 60)
    print("REPLY PARSING DEMO")
    print("=" * 60)

    encoder = CheckMacEncoder("5294y06JbISpM5x9", "v77hoKGq4kWxNNIS")

    print("\n1. Form-encoded reply:")
    fields = encoder.encode_payload({
        "RtnCode": "300",
        "RtnMsg": "Order created",
        "AllPayLogisticsID": "1718546",
        "CVSPaymentNo": "C9923891",
        "CVSValidationNo": "5765",
    })
    body = "&".join(f"{key}={value}" for key, value in fields.items())
    response = Response(body, encoder=encoder)
    print(f"   Success: {response.is_success()}")
    print(f"   Verified: {response.verify()}")
    print(f"   Payment no: {response.cvs_payment_no}")

    print("\n2. JSON reply:")
    response = Response('{"RtnCode": 1, "RtnMsg": "OK", "StoreInfo": []}')
    print(f"   Success: {response.is_success()} ({response.rtn_msg})")

    print("\n3. Empty reply:")
    response = Response("")
    print(f"   Parse error: {response.parse_error}")
