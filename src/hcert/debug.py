"""Debug rendering of envelopes for diagnostics."""

import base64
import logging
from typing import Any, Optional

from . import cbor_utils, edn_utils
from .key_params import KEY_ID_LENGTH
from .transport import unpack


def _render_bytes(data: bytes) -> str:
    if len(data) == KEY_ID_LENGTH:
        return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")
    return base64.b64encode(data).decode("ascii")


def expand(value: Any) -> Any:
    """Recursively decode nested CBOR into an inspectable tree.

    Byte strings that hold a single CBOR item are decoded and expanded in
    turn. Other byte strings become text: 8 byte values (key ids) in
    unpadded URL-safe base64, everything else in standard base64. Arrays,
    maps and tags keep their shape and order.
    """
    if isinstance(value, (bytes, bytearray)):
        try:
            decoded = cbor_utils.decode(value)
        except (cbor_utils.CBORDecodeError, ValueError, TypeError):
            return _render_bytes(bytes(value))
        return expand(decoded)

    if cbor_utils.is_array(value):
        return [expand(item) for item in value]

    if cbor_utils.is_map(value):
        return {key: expand(item) for key, item in value.items()}

    if cbor_utils.is_tag(value):
        return cbor_utils.create_tag(
            cbor_utils.get_tag_number(value), expand(cbor_utils.get_tag_value(value))
        )

    return value


def debug(token: str, log: Optional[logging.Logger] = None) -> Any:
    """Unpack a token and expand its envelope."""
    return expand(unpack(token, log))


def diagnostic(token: str, log: Optional[logging.Logger] = None) -> str:
    """Render the unpacked envelope of a token in CBOR diagnostic notation."""
    return edn_utils.cbor_to_diag(unpack(token, log))
