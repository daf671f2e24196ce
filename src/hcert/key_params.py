"""Key parameter derivation from X.509 certificates and PKCS8 private keys.

Certificates are reduced to an algorithm-tagged record holding the raw key
material the COSE layer needs. The byte ranges are cut at fixed offsets of
the DER encodings, the same way already-issued certificates were produced,
so the key id and coordinates match other implementations byte for byte.
"""

import hashlib
from dataclasses import dataclass
from typing import Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from .cose_sign1 import COSE_ALG_ES256, COSE_ALG_PS256
from .errors import MalformedCertificateError, MalformedPrivateKeyError, UnsupportedAlgorithmError

KEY_ID_LENGTH = 8

# RSAPublicKey DER: SEQUENCE and INTEGER headers plus the modulus sign byte,
# then the encoded exponent INTEGER (02 03 xx xx xx).
RSA_MODULUS_PREFIX = 9
RSA_MODULUS_SUFFIX = 5
RSA_EXPONENT_LENGTH = 3

EC_COORDINATE_LENGTH = 32
EC_POINT_LENGTH = 1 + 2 * EC_COORDINATE_LENGTH

# ECPrivateKey DER: SEQUENCE header, version INTEGER, OCTET STRING header.
EC_PRIVATE_SCALAR_OFFSET = 7


@dataclass(frozen=True)
class RsaKeyParameters:
    """RSA public key material for PS256 verification."""

    key_id: bytes
    modulus: bytes
    exponent: bytes

    alg = "PS256"
    cose_alg = COSE_ALG_PS256


@dataclass(frozen=True)
class EcKeyParameters:
    """EC P-256 key material for ES256; d is only set for signing keys."""

    key_id: bytes
    x: bytes
    y: bytes
    point_format: bytes = b"\x04"
    d: Optional[bytes] = None

    alg = "ES256"
    cose_alg = COSE_ALG_ES256


KeyParameters = Union[RsaKeyParameters, EcKeyParameters]


def _as_bytes(pem: Union[str, bytes]) -> bytes:
    return pem.encode("ascii") if isinstance(pem, str) else pem


def load_certificate(certificate_pem: Union[str, bytes]) -> x509.Certificate:
    """Parse a PEM certificate.

    Raises:
        MalformedCertificateError: If the text is not a PEM certificate
    """
    try:
        return x509.load_pem_x509_certificate(_as_bytes(certificate_pem))
    except (ValueError, TypeError) as err:
        raise MalformedCertificateError(f"Cannot parse certificate: {err}") from err


def key_id_for_certificate(certificate: x509.Certificate) -> bytes:
    """Return the first 8 bytes of SHA-256 over the DER certificate."""
    der = certificate.public_bytes(serialization.Encoding.DER)
    return hashlib.sha256(der).digest()[:KEY_ID_LENGTH]


def derive_from_certificate(certificate_pem: Union[str, bytes]) -> KeyParameters:
    """Derive algorithm-tagged key parameters from a PEM certificate.

    Args:
        certificate_pem: Signer certificate in PEM form

    Returns:
        RsaKeyParameters for RSA keys, EcKeyParameters for P-256 keys

    Raises:
        MalformedCertificateError: If the certificate or its key encoding is unusable
        UnsupportedAlgorithmError: For key types other than RSA and EC P-256
    """
    certificate = load_certificate(certificate_pem)
    key_id = key_id_for_certificate(certificate)
    public_key = certificate.public_key()

    if isinstance(public_key, rsa.RSAPublicKey):
        raw = public_key.public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.PKCS1
        )
        if len(raw) <= RSA_MODULUS_PREFIX + RSA_MODULUS_SUFFIX:
            raise MalformedCertificateError(f"RSA key encoding too short: {len(raw)} bytes")
        return RsaKeyParameters(
            key_id=key_id,
            modulus=raw[RSA_MODULUS_PREFIX:-RSA_MODULUS_SUFFIX],
            exponent=raw[-RSA_EXPONENT_LENGTH:],
        )

    if isinstance(public_key, ec.EllipticCurvePublicKey):
        if not isinstance(public_key.curve, ec.SECP256R1):
            raise UnsupportedAlgorithmError(f"Unsupported curve: {public_key.curve.name}")
        raw = public_key.public_bytes(
            serialization.Encoding.X962, serialization.PublicFormat.UncompressedPoint
        )
        if len(raw) < EC_POINT_LENGTH:
            raise MalformedCertificateError(f"EC key encoding too short: {len(raw)} bytes")
        return EcKeyParameters(
            key_id=key_id,
            point_format=raw[:1],
            x=raw[1 : 1 + EC_COORDINATE_LENGTH],
            y=raw[1 + EC_COORDINATE_LENGTH : EC_POINT_LENGTH],
        )

    raise UnsupportedAlgorithmError(f"Unsupported key type: {type(public_key).__name__}")


def derive_private_from_key(private_key_pem: Union[str, bytes]) -> bytes:
    """Extract the 32 byte private scalar from a PKCS8 EC private key.

    Only EC P-256 keys are accepted: RSA issuance is not supported.

    Raises:
        MalformedPrivateKeyError: If the key cannot be parsed or is too short
        UnsupportedAlgorithmError: If the key is not an EC key
    """
    try:
        private_key = serialization.load_pem_private_key(_as_bytes(private_key_pem), password=None)
    except (ValueError, TypeError) as err:
        raise MalformedPrivateKeyError(f"Cannot parse private key: {err}") from err

    if not isinstance(private_key, ec.EllipticCurvePrivateKey):
        raise UnsupportedAlgorithmError(
            f"RSA issuance unsupported, got {type(private_key).__name__}"
        )

    raw = private_key.private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    )
    end = EC_PRIVATE_SCALAR_OFFSET + EC_COORDINATE_LENGTH
    if len(raw) < end:
        raise MalformedPrivateKeyError(f"EC private key encoding too short: {len(raw)} bytes")
    return raw[EC_PRIVATE_SCALAR_OFFSET:end]


def derive_signing_parameters(
    certificate_pem: Union[str, bytes], private_key_pem: Union[str, bytes]
) -> EcKeyParameters:
    """Combine certificate parameters with the private scalar for signing.

    Raises:
        UnsupportedAlgorithmError: If the certificate carries an RSA key
    """
    params = derive_from_certificate(certificate_pem)
    if not isinstance(params, EcKeyParameters):
        raise UnsupportedAlgorithmError(f"RSA issuance unsupported ({params.alg} certificate)")
    return EcKeyParameters(
        key_id=params.key_id,
        x=params.x,
        y=params.y,
        point_format=params.point_format,
        d=derive_private_from_key(private_key_pem),
    )
