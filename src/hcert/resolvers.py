"""Key resolvers mapping a base64 key id to a trusted PEM certificate.

A resolver is any callable taking the standard base64 form of an envelope's
key id and returning the signer certificate as PEM text, or None when the
key id is unknown.
"""

import base64
from typing import Callable, Optional, Union

from .key_params import key_id_for_certificate, load_certificate

KeyResolver = Callable[[str], Optional[str]]


def key_id_to_base64(key_id: bytes) -> str:
    """Encode a key id the way resolvers index it (standard alphabet, padded)."""
    return base64.b64encode(key_id).decode("ascii")


def mapping_resolver(certificates_by_kid: dict[str, str]) -> KeyResolver:
    """Create a resolver backed by a plain {base64 kid: PEM} mapping."""
    lookup = dict(certificates_by_kid)

    def resolve(key_id_b64: str) -> Optional[str]:
        return lookup.get(key_id_b64)

    return resolve


def certificate_kid_resolver(certificates: list[Union[str, bytes]]) -> KeyResolver:
    """Create a resolver over trusted certificates keyed by their fingerprints.

    Args:
        certificates: PEM certificates of trusted issuers

    Returns:
        Resolver function returning the matching PEM text or None

    Raises:
        MalformedCertificateError: If one of the certificates cannot be parsed
    """
    lookup: dict[str, str] = {}

    for certificate_pem in certificates:
        pem = certificate_pem.decode("ascii") if isinstance(certificate_pem, bytes) else certificate_pem
        kid = key_id_for_certificate(load_certificate(pem))
        lookup[key_id_to_base64(kid)] = pem

    return mapping_resolver(lookup)
