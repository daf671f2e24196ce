"""EDN (Extended Diagnostic Notation) utilities wrapper.

This module provides a unified interface for CBOR EDN operations,
abstracting the underlying cbor-diag library implementation.
"""

import cbor_diag  # type: ignore[import-untyped]


def cbor_to_diag(cbor_data: bytes) -> str:
    """Convert CBOR data to diagnostic notation.

    Args:
        cbor_data: CBOR encoded bytes

    Returns:
        Diagnostic notation string
    """
    return cbor_diag.cbor2diag(cbor_data)  # type: ignore[no-any-return]


def diag_to_cbor(diag_str: str) -> bytes:
    """Convert diagnostic notation to CBOR data."""
    return cbor_diag.diag2cbor(diag_str)  # type: ignore[no-any-return]
