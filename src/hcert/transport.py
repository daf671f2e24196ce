"""Transport encoding between signed envelopes and ``HC1:`` tokens.

Tokens are the scheme prefix followed by the zlib-compressed envelope in
Base45 (default) or Base32. Decoding also accepts tokens from older
issuers: missing prefix, prefix without colon, and uncompressed envelopes.
"""

import base64
import binascii
import logging
import re
import zlib
from enum import Enum
from typing import Any, Optional, Union

import base45

from .envelope import sign, verify_and_return_payload
from .errors import MalformedTokenError, UnrecognizedEncodingError
from .resolvers import KeyResolver

logger = logging.getLogger(__name__)

URI_SCHEMA = "HC1"

# First byte of a zlib stream using the deflate method with a 32K window.
ZLIB_HEADER_BYTE = 0x78

BASE32_PATTERN = re.compile(r"[A-Z2-7]+=*")
BASE45_PATTERN = re.compile(r"[A-Z0-9 $%*+./:-]+")


class TransportEncoding(Enum):
    """Textual encodings a token body may use."""

    BASE32 = "base32"
    BASE45 = "base45"


def strip_prefix(token: str, log: Optional[logging.Logger] = None) -> str:
    """Remove the ``HC1:`` prefix, tolerating its legacy absent forms."""
    log = log or logger

    if not token.startswith(URI_SCHEMA):
        log.warning("No %s: prefix, treating token as legacy format", URI_SCHEMA)
        return token

    data = token[len(URI_SCHEMA):]
    if data.startswith(":"):
        return data[1:]

    log.warning("Unsafe %s prefix without colon from legacy issuer", URI_SCHEMA)
    return data


def detect_encoding(data: str) -> TransportEncoding:
    """Classify a token body by its alphabet, Base32 checked first.

    Raises:
        UnrecognizedEncodingError: If the body fits neither alphabet
    """
    if BASE32_PATTERN.fullmatch(data):
        return TransportEncoding.BASE32
    if BASE45_PATTERN.fullmatch(data):
        return TransportEncoding.BASE45
    raise UnrecognizedEncodingError(f"Payload is neither Base32 nor Base45: {data[:32]!r}")


def _b32decode(data: str) -> bytes:
    return base64.b32decode(data + "=" * (-len(data) % 8))


def _b32encode(data: bytes) -> str:
    return base64.b32encode(data).decode("ascii").rstrip("=")


def _b45encode(data: bytes) -> str:
    encoded = base45.b45encode(data)
    return encoded.decode("ascii") if isinstance(encoded, bytes) else encoded


def unpack(token: str, log: Optional[logging.Logger] = None) -> bytes:
    """Decode a token into envelope bytes.

    Args:
        token: ``HC1:`` token, legacy forms accepted
        log: Diagnostic sink, defaults to the module logger

    Returns:
        Envelope bytes, inflated when they start with the zlib header byte

    Raises:
        MalformedTokenError: If the body cannot be decoded or inflated
    """
    data = strip_prefix(token, log)
    encoding = detect_encoding(data)

    try:
        if encoding is TransportEncoding.BASE32:
            decoded = _b32decode(data)
        else:
            decoded = base45.b45decode(data)
    except (binascii.Error, ValueError) as err:
        raise MalformedTokenError(f"Invalid {encoding.value} payload: {err}") from err

    if decoded[:1] == bytes([ZLIB_HEADER_BYTE]):
        try:
            decoded = zlib.decompress(decoded)
        except zlib.error as err:
            raise MalformedTokenError(f"Cannot inflate payload: {err}") from err

    return decoded


def pack(envelope: bytes, encoding: TransportEncoding = TransportEncoding.BASE45) -> str:
    """Compress an envelope and encode it as an ``HC1:`` token."""
    zipped = zlib.compress(envelope)
    if encoding is TransportEncoding.BASE32:
        body = _b32encode(zipped)
    else:
        body = _b45encode(zipped)
    return f"{URI_SCHEMA}:{body}"


def pack32(envelope: bytes) -> str:
    return pack(envelope, TransportEncoding.BASE32)


def pack45(envelope: bytes) -> str:
    return pack(envelope, TransportEncoding.BASE45)


def sign_and_pack(
    payload: Any,
    certificate_pem: Union[str, bytes],
    private_key_pem: Union[str, bytes],
    encoding: TransportEncoding = TransportEncoding.BASE45,
) -> str:
    """Sign a CWT claim map and encode the envelope as a token.

    The payload must already be the claim map (see cwt.make_cwt).
    """
    return pack(sign(payload, certificate_pem, private_key_pem), encoding)


def sign_and_pack32(payload: Any, certificate_pem: Union[str, bytes], private_key_pem: Union[str, bytes]) -> str:
    return sign_and_pack(payload, certificate_pem, private_key_pem, TransportEncoding.BASE32)


def sign_and_pack45(payload: Any, certificate_pem: Union[str, bytes], private_key_pem: Union[str, bytes]) -> str:
    return sign_and_pack(payload, certificate_pem, private_key_pem, TransportEncoding.BASE45)


def unpack_and_verify(
    token: str,
    fallback_certificate_pem: Optional[Union[str, bytes]] = None,
    resolver: Optional[KeyResolver] = None,
    log: Optional[logging.Logger] = None,
) -> Optional[Any]:
    """Decode and verify a token.

    Returns:
        The CWT claim map, or None on any failure (the cause is logged)
    """
    log = log or logger
    try:
        return verify_and_return_payload(unpack(token, log), fallback_certificate_pem, resolver, log)
    except Exception as err:
        log.warning("Token rejected: %s", err)
        return None
