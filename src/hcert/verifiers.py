"""Verifiers selected from derived key parameters."""

from .cose_sign1 import ES256Verifier, PS256Verifier, Verifier
from .errors import UnsupportedAlgorithmError
from .key_params import EcKeyParameters, KeyParameters, RsaKeyParameters


def create_verifier(key_params: KeyParameters) -> Verifier:
    """Build the COSE verifier matching the key parameter variant.

    Args:
        key_params: Parameters derived from the signer certificate

    Returns:
        ES256Verifier for EC keys, PS256Verifier for RSA keys
    """
    if isinstance(key_params, EcKeyParameters):
        return ES256Verifier(key_params.x, key_params.y)
    if isinstance(key_params, RsaKeyParameters):
        return PS256Verifier(key_params.modulus, key_params.exponent)
    raise UnsupportedAlgorithmError(f"No verifier for {type(key_params).__name__}")
