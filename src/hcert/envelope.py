"""Signing and verification of HCERT COSE envelopes.

Issuance signs a CWT claim map with the issuer certificate's EC key.
Verification reads the key id straight from the untrusted envelope, finds
the signer certificate through a resolver (or a caller supplied fallback)
and checks the signature before handing back the decoded claims.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from . import cbor_utils
from .cose_sign1 import (
    COSE_HEADER_ALG,
    COSE_HEADER_KID,
    algorithm_name,
    cose_sign1_sign,
    cose_sign1_verify,
)
from .cwt import CWT_ISSUER
from .errors import KeyNotFoundError, SignatureInvalidError, UnreadableEnvelopeError
from .key_params import derive_from_certificate
from .resolvers import KeyResolver, key_id_to_base64
from .signers import CertificateSigner
from .verifiers import create_verifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeaderInfo:
    """Metadata readable from an envelope without checking its signature."""

    alg: Any = None
    key_id: Optional[bytes] = None
    issuer: Any = None
    alg_name: Optional[str] = None


def sign(
    payload: Any,
    certificate_pem: Union[str, bytes],
    private_key_pem: Union[str, bytes],
) -> bytes:
    """Sign a claim map into a tagged COSE_Sign1 envelope.

    Args:
        payload: CWT claim map (see cwt.make_cwt), CBOR-encoded as is
        certificate_pem: Issuer certificate, source of the key id
        private_key_pem: PKCS8 EC private key matching the certificate

    Returns:
        CBOR-encoded envelope bytes
    """
    signer = CertificateSigner(certificate_pem, private_key_pem)
    protected_header = {
        COSE_HEADER_ALG: signer.algorithm,
        COSE_HEADER_KID: signer.key_id,
    }
    return cose_sign1_sign(
        cbor_utils.encode(payload),
        signer,
        protected_header=protected_header,
        unprotected_header={},
    )


def normalize_header(header: Any) -> dict[Any, Any]:
    """Return a header as a decoded map.

    Protected headers arrive as CBOR byte strings, unprotected ones as maps.
    Empty byte strings and absent headers become an empty map.

    Raises:
        UnreadableEnvelopeError: If header bytes do not decode to a map
    """
    if isinstance(header, (bytes, bytearray)):
        if not header:
            return {}
        try:
            header = cbor_utils.decode(header)
        except (cbor_utils.CBORDecodeError, ValueError, TypeError) as err:
            raise UnreadableEnvelopeError(f"Header is not CBOR: {err}") from err
        if not cbor_utils.is_map(header):
            raise UnreadableEnvelopeError(f"Header is not a map: {type(header).__name__}")
        return dict(header)

    if cbor_utils.is_map(header):
        return dict(header)

    return {}


def _envelope_items(envelope: bytes, log: logging.Logger) -> list[Any]:
    try:
        decoded = cbor_utils.decode(envelope)
    except (cbor_utils.CBORDecodeError, ValueError, TypeError) as err:
        raise UnreadableEnvelopeError(f"Not a readable COSE envelope: {err}") from err

    if decoded is None:
        raise UnreadableEnvelopeError("Not a readable COSE envelope")

    if cbor_utils.is_tag(decoded, cbor_utils.COSE_SIGN1_TAG):
        items = cbor_utils.get_tag_value(decoded)
    elif cbor_utils.is_tag(decoded):
        raise UnreadableEnvelopeError(
            f"Unexpected CBOR tag {cbor_utils.get_tag_number(decoded)} on COSE envelope"
        )
    elif cbor_utils.is_array(decoded):
        log.warning("COSE envelope without tag, reading bare array")
        items = decoded
    else:
        raise UnreadableEnvelopeError(
            f"COSE envelope is neither tagged nor an array: {type(decoded).__name__}"
        )

    if not cbor_utils.is_array(items) or len(items) != 4:
        raise UnreadableEnvelopeError("COSE envelope is not a four element array")
    return list(items)


def extract_header_info(envelope: bytes, log: Optional[logging.Logger] = None) -> HeaderInfo:
    """Read algorithm, key id and issuer without verifying the signature.

    Protected header values take precedence over unprotected ones. A
    payload that does not decode leaves the issuer unset.

    Args:
        envelope: CBOR-encoded COSE_Sign1 bytes
        log: Diagnostic sink, defaults to the module logger

    Raises:
        UnreadableEnvelopeError: If the envelope is not a four element COSE array
    """
    log = log or logger
    protected, unprotected, payload, _ = _envelope_items(envelope, log)

    issuer = None
    try:
        claims = cbor_utils.decode(payload)
        if cbor_utils.is_map(claims):
            issuer = claims.get(CWT_ISSUER)
    except (cbor_utils.CBORDecodeError, ValueError, TypeError) as err:
        log.debug("Envelope payload not readable: %s", err)

    protected_header = normalize_header(protected)
    unprotected_header = normalize_header(unprotected)
    headers = {**unprotected_header, **protected_header}

    alg = headers.get(COSE_HEADER_ALG)
    key_id = headers.get(COSE_HEADER_KID)
    return HeaderInfo(
        alg=alg,
        alg_name=algorithm_name(alg),
        key_id=bytes(key_id) if isinstance(key_id, (bytes, bytearray)) else None,
        issuer=issuer,
    )


def verify_and_return_payload(
    envelope: bytes,
    fallback_certificate_pem: Optional[Union[str, bytes]] = None,
    resolver: Optional[KeyResolver] = None,
    log: Optional[logging.Logger] = None,
) -> Any:
    """Verify an envelope and return its decoded CWT claims.

    Args:
        envelope: CBOR-encoded COSE_Sign1 bytes
        fallback_certificate_pem: Certificate used when the resolver has no match
        resolver: Trusted key directory, queried with the base64 key id
        log: Diagnostic sink, defaults to the module logger

    Returns:
        The CWT claim map

    Raises:
        UnreadableEnvelopeError: If the envelope structure is invalid
        KeyNotFoundError: If no certificate is available for the key id
        SignatureInvalidError: If the signature does not verify
    """
    log = log or logger
    info = extract_header_info(envelope, log)

    certificate_pem = None
    if resolver is not None and info.key_id is not None:
        certificate_pem = resolver(key_id_to_base64(info.key_id))

    if not certificate_pem:
        certificate_pem = fallback_certificate_pem

    if not certificate_pem:
        kid = key_id_to_base64(info.key_id) if info.key_id is not None else None
        raise KeyNotFoundError(f"Public key not found for kid {kid}")

    verifier = create_verifier(derive_from_certificate(certificate_pem))

    is_valid, payload = cose_sign1_verify(envelope, verifier)
    if not is_valid or payload is None:
        raise SignatureInvalidError("Envelope signature does not verify")

    return cbor_utils.decode(payload)


def verify(
    envelope: bytes,
    fallback_certificate_pem: Optional[Union[str, bytes]] = None,
    resolver: Optional[KeyResolver] = None,
    log: Optional[logging.Logger] = None,
) -> bool:
    """Return True only if the envelope verifies; any failure yields False."""
    log = log or logger
    try:
        verify_and_return_payload(envelope, fallback_certificate_pem, resolver, log)
        return True
    except Exception as err:
        log.warning("Verification failed: %s", err)
        return False
