"""CBOR utilities module.

This module provides a unified interface for CBOR operations, isolating the
underlying CBOR library implementation from the codec.

Currently uses cbor2 as the underlying implementation.
"""

from collections.abc import Mapping
from io import BytesIO
from typing import Any, Union

import cbor2

# Type aliases for CBOR special values
CBORTag = cbor2.CBORTag
CBORDecodeError = cbor2.CBORDecodeError

COSE_SIGN1_TAG = 18


def encode(obj: Any, canonical: bool = False) -> bytes:
    """Encode an object to CBOR bytes.

    Args:
        obj: The object to encode
        canonical: Whether to use canonical encoding (deterministic)

    Returns:
        CBOR-encoded bytes
    """
    return cbor2.dumps(obj, canonical=canonical)


def decode(data: bytes) -> Any:
    """Decode exactly one CBOR data item.

    Trailing bytes after the first item are rejected, so arbitrary binary
    blobs (signatures, key ids) are not mistaken for short CBOR values.

    Args:
        data: CBOR-encoded bytes

    Returns:
        The decoded object

    Raises:
        CBORDecodeError: If the data is not a single valid CBOR item
    """
    with BytesIO(bytes(data)) as fp:
        obj = cbor2.CBORDecoder(fp).decode()
        if fp.tell() != len(data):
            raise CBORDecodeError(f"{len(data) - fp.tell()} trailing bytes after CBOR item")
    return obj


def is_array(obj: Any) -> bool:
    """Check for a decoded CBOR array.

    cbor2 5 decodes arrays as lists, cbor2 6 as tuples inside tags.
    """
    return isinstance(obj, (list, tuple))


def is_map(obj: Any) -> bool:
    """Check for a decoded CBOR map (dict or cbor2 frozendict)."""
    return isinstance(obj, Mapping)


def create_tag(tag: int, value: Any) -> CBORTag:
    """Create a CBOR tag."""
    return CBORTag(tag, value)


def is_tag(obj: Any, tag_number: Union[int, None] = None) -> bool:
    """Check if an object is a CBOR tag.

    Args:
        obj: The object to check
        tag_number: Optional specific tag number to check for

    Returns:
        True if the object is a CBOR tag (and matches tag_number if specified)
    """
    if not isinstance(obj, CBORTag):
        return False
    if tag_number is not None:
        return obj.tag == tag_number
    return True


def get_tag_number(obj: CBORTag) -> int:
    """Get the tag number from a CBOR tag."""
    return obj.tag


def get_tag_value(obj: CBORTag) -> Any:
    """Get the tagged value from a CBOR tag."""
    return obj.value
