"""
CheckMacValue signing for the logistics API.

Every request carries a CheckMacValue field and every reply and status
notification is expected to carry one. The provider computes it as:

1. Drop any existing CheckMacValue
2. Sort fields by name, case-insensitively
3. Join as key=value&key=value (form-encode, then decode again)
4. Wrap as HashKey=<key>&<fields>&HashIV=<iv>
5. URL-encode the whole string and lower-case it
6. Undo the escapes the provider's .NET encoder leaves alone
7. MD5, upper-case hex

Step 6 is not cosmetic. The provider verifies with .NET's UrlEncode,
which keeps - _ . ! * ( ) literal and writes space as "+". Skipping
the substitution produces digests the provider rejects.
"""

import hashlib
import hmac
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Tuple
from urllib.parse import quote_plus, unquote_plus

from .constants import Config
from .errors import PreconditionError, SignatureMismatch


# Escapes produced by a PHP-style urlencode that .NET's encoder does not
# produce. Applied after lower-casing.
DOTNET_URL_ENCODE_TABLE: Tuple[Tuple[str, str], ...] = (
    ("%2d", "-"),
    ("%5f", "_"),
    ("%2e", "."),
    ("%21", "!"),
    ("%2a", "*"),
    ("%28", "("),
    ("%29", ")"),
    ("%20", "+"),
)

SENSITIVE_FIELDS = (Config.CHECK_MAC_FIELD, "HashKey", "HashIV")


def _stringify(value: Any) -> str:
    """Render a scalar the way a form encoder does."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def urlencode(raw: str) -> str:
    """
    URL-encode like PHP's urlencode().

    Only A-Z a-z 0-9 - _ . stay literal and space becomes "+".
    quote_plus() also keeps "~" literal, so it is escaped afterwards.
    """
    return quote_plus(raw, safe="").replace("~", "%7E")


def dotnet_url_encode(encoded: str) -> str:
    """Apply the .NET compatibility substitutions to a lower-cased string."""
    for search, replace in DOTNET_URL_ENCODE_TABLE:
        encoded = encoded.replace(search, replace)
    return encoded


def sort_fields(payload: Mapping[str, Any]) -> Iterable[Tuple[str, Any]]:
    """Order fields by name case-insensitively, ties broken on the raw name."""
    return sorted(payload.items(), key=lambda item: (item[0].lower(), item[0]))


def build_query(fields: Iterable[Tuple[str, Any]]) -> str:
    """
    Serialize fields as key=value&key=value.

    Fields are form-encoded and then decoded back, so the signing string
    holds the raw characters and step 5 is the only encoding applied.
    None values are skipped, as a form encoder would.
    """
    encoded = "&".join(
        f"{quote_plus(str(key), safe='')}={quote_plus(_stringify(value), safe='')}"
        for key, value in fields
        if value is not None
    )
    return unquote_plus(encoded)


class CheckMacEncoder:
    """
    Compute and verify CheckMacValue digests.

    Usage:
        encoder = CheckMacEncoder(hash_key="...", hash_iv="...")

        signed = encoder.encode_payload({"MerchantID": "2000132", ...})

        if encoder.verify_response(request.form.to_dict()):
            ...
    """

    def __init__(self, hash_key: str, hash_iv: str):
        """
        Initialize with the merchant's signing secrets.

        Args:
            hash_key: HashKey issued by the provider
            hash_iv: HashIV issued by the provider

        Raises:
            PreconditionError if either secret is empty
        """
        if not hash_key:
            raise PreconditionError("HashKey must not be empty")
        if not hash_iv:
            raise PreconditionError("HashIV must not be empty")

        self.hash_key = hash_key
        self.hash_iv = hash_iv

    def generate_check_mac_value(self, payload: Mapping[str, Any]) -> str:
        """
        Compute the digest for a payload.

        Args:
            payload: Wire fields; an existing CheckMacValue is ignored

        Returns:
            32 upper-case hex characters
        """
        fields = {
            key: value for key, value in payload.items()
            if key != Config.CHECK_MAC_FIELD
        }

        query = build_query(sort_fields(fields))
        raw = f"HashKey={self.hash_key}&{query}&HashIV={self.hash_iv}"

        encoded = dotnet_url_encode(urlencode(raw).lower())

        return hashlib.md5(encoded.encode("utf-8")).hexdigest().upper()

    # The provider docs call this "signing"
    sign = generate_check_mac_value

    def encode_payload(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Return a copy of the payload with a fresh CheckMacValue appended.

        A stale CheckMacValue is dropped before signing, never merged.
        """
        signed = {
            key: value for key, value in payload.items()
            if key != Config.CHECK_MAC_FIELD
        }
        signed[Config.CHECK_MAC_FIELD] = self.generate_check_mac_value(signed)
        return signed

    def verify_response(self, payload: Mapping[str, Any]) -> bool:
        """
        Check the CheckMacValue supplied by the provider.

        Returns:
            False when the field is absent or does not match
        """
        received = payload.get(Config.CHECK_MAC_FIELD)
        if not received:
            return False

        expected = self.generate_check_mac_value(payload)

        # Constant-time comparison
        return hmac.compare_digest(str(received).upper(), expected)

    verify = verify_response

    def verify_or_fail(self, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        """
        Verify and return the payload.

        Raises:
            SignatureMismatch if the CheckMacValue is missing or wrong
        """
        if not self.verify_response(payload):
            raise SignatureMismatch()
        return payload


# =============================================================================
# Log masking
# =============================================================================

def mask_value(value: str) -> str:
    """
    Mask a secret for display.

    Examples:
        5294y06JbISpM5x9 → 5294********M5x9
        short → *****
    """
    length = len(value)
    if length > 8:
        return value[:4] + "*" * (length - 8) + value[-4:]
    return "*" * length


def mask_sensitive(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of a payload with signatures and secrets masked for logging."""
    masked = dict(payload)
    for key in SENSITIVE_FIELDS:
        if isinstance(masked.get(key), str):
            masked[key] = mask_value(masked[key])
    return masked


# =============================================================================
# Demo
# =============================================================================

def demo_checkmac():
    """Demonstrate signing and verification with the public stage secrets."""
    print("=" * 60)
    print("CHECKMACVALUE DEMO")
    print("=" * 60)

    encoder = CheckMacEncoder(hash_key="5294y06JbISpM5x9", hash_iv="v77hoKGq4kWxNNIS")
    payload = {
        "MerchantID": "2000132",
        "MerchantTradeNo": "TEST123",
        "LogisticsType": "CVS",
    }

    print("\n1. Signing a payload:")
    signed = encoder.encode_payload(payload)
    for key, value in signed.items():
        print(f"   {key} = {value}")

    print("\n2. Verifying it:")
    print(f"   Valid: {encoder.verify_response(signed)}")

    print("\n3. Tampering with it:")
    tampered = dict(signed, MerchantTradeNo="TEST124")
    print(f"   Valid: {encoder.verify_response(tampered)}")

    print("\n4. Masked for logs:")
    print(f"   {mask_sensitive(signed)}")
