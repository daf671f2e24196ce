"""COSE_Sign1 primitive with pluggable signers and verifiers.

Envelopes are built and checked here without any knowledge of certificates
or health claims; callers hand in objects implementing the Signer and
Verifier protocols below.
"""

from typing import Any, Optional, Protocol

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa, utils

from . import cbor_utils

COSE_HEADER_ALG = 1
COSE_HEADER_KID = 4

COSE_ALG_ES256 = -7
COSE_ALG_PS256 = -37

ALGORITHM_NAMES = {
    COSE_ALG_ES256: "ES256",
    COSE_ALG_PS256: "PS256",
}


def algorithm_name(alg: Any) -> Optional[str]:
    """Map a COSE algorithm header value to its name.

    Args:
        alg: Integer identifier as found in the header (or a name already)

    Returns:
        "ES256", "PS256" or None for anything unknown
    """
    if isinstance(alg, str):
        return alg if alg in ALGORITHM_NAMES.values() else None
    if not isinstance(alg, int):
        return None
    return ALGORITHM_NAMES.get(alg)


class Signer(Protocol):
    """Protocol for COSE Sign1 signers."""

    def sign(self, message: bytes) -> bytes:
        """Sign the Sig_structure bytes and return the raw signature."""

    @property
    def algorithm(self) -> int:
        """COSE algorithm identifier (e.g., -7 for ES256)."""


class Verifier(Protocol):
    """Protocol for COSE Sign1 verifiers."""

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Return True if signature is valid for message."""


def _sig_structure(protected_header_bytes: bytes, payload: bytes, external_aad: bytes) -> bytes:
    return cbor_utils.encode(["Signature1", protected_header_bytes, external_aad, payload])


def cose_sign1_sign(
    payload: bytes,
    signer: Signer,
    protected_header: Optional[dict[int, Any]] = None,
    unprotected_header: Optional[dict[int, Any]] = None,
    external_aad: bytes = b"",
) -> bytes:
    """Create a tagged COSE_Sign1 message.

    Args:
        payload: The payload bytes to sign
        signer: A signer object that implements the sign method
        protected_header: Protected header parameters (integrity protected)
        unprotected_header: Unprotected header parameters
        external_aad: External additional authenticated data

    Returns:
        CBOR-encoded COSE_Sign1 message with tag 18
    """
    protected_header = dict(protected_header or {})
    protected_header.setdefault(COSE_HEADER_ALG, signer.algorithm)
    protected_header_bytes = cbor_utils.encode(protected_header)

    if unprotected_header is None:
        unprotected_header = {}

    signature = signer.sign(_sig_structure(protected_header_bytes, payload, external_aad))

    cose_sign1 = [protected_header_bytes, unprotected_header, payload, signature]
    return cbor_utils.encode(cbor_utils.create_tag(cbor_utils.COSE_SIGN1_TAG, cose_sign1))


def cose_sign1_verify(
    cose_sign1_message: bytes,
    verifier: Verifier,
    external_aad: bytes = b"",
) -> tuple[bool, Optional[bytes]]:
    """Verify a COSE_Sign1 message.

    Both the tagged and the untagged form are accepted.

    Args:
        cose_sign1_message: CBOR-encoded COSE_Sign1 message
        verifier: A verifier object that implements the verify method
        external_aad: External additional authenticated data used during signing

    Returns:
        Tuple of (verification_result, payload if verified successfully)
    """
    try:
        decoded = cbor_utils.decode(cose_sign1_message)

        if cbor_utils.is_tag(decoded):
            if cbor_utils.get_tag_number(decoded) != cbor_utils.COSE_SIGN1_TAG:
                return False, None
            cose_sign1 = cbor_utils.get_tag_value(decoded)
        else:
            cose_sign1 = decoded

        if not cbor_utils.is_array(cose_sign1) or len(cose_sign1) != 4:
            return False, None

        protected_header_bytes, _, payload, signature = cose_sign1
        if not isinstance(payload, bytes) or not isinstance(signature, bytes):
            return False, None

        if verifier.verify(_sig_structure(protected_header_bytes, payload, external_aad), signature):
            return True, payload
        return False, None

    except (ValueError, TypeError, cbor_utils.CBORDecodeError):
        return False, None


class ES256Signer:
    """ECDSA P-256 SHA-256 signer implementation."""

    def __init__(self, private_key_bytes: bytes):
        """Initialize ES256 signer with the raw private scalar.

        Args:
            private_key_bytes: The private key bytes (32 bytes for P-256)
        """
        private_value = int.from_bytes(private_key_bytes, byteorder="big")
        self.private_key = ec.derive_private_key(private_value, ec.SECP256R1())

    def sign(self, message: bytes) -> bytes:
        """Sign a message with ES256, returning raw r||s."""
        signature_der = self.private_key.sign(message, ec.ECDSA(hashes.SHA256()))
        r, s = utils.decode_dss_signature(signature_der)
        return r.to_bytes(32, byteorder="big") + s.to_bytes(32, byteorder="big")

    @property
    def algorithm(self) -> int:
        return COSE_ALG_ES256


class ES256Verifier:
    """ECDSA P-256 SHA-256 verifier implementation."""

    def __init__(self, public_key_x: bytes, public_key_y: bytes):
        """Initialize ES256 verifier with public key coordinates.

        Args:
            public_key_x: X coordinate of public key (32 bytes)
            public_key_y: Y coordinate of public key (32 bytes)
        """
        x = int.from_bytes(public_key_x, byteorder="big")
        y = int.from_bytes(public_key_y, byteorder="big")
        public_numbers = ec.EllipticCurvePublicNumbers(x, y, ec.SECP256R1())
        self.public_key = public_numbers.public_key()

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Verify a raw r||s signature with ES256."""
        if len(signature) != 64:
            return False

        r = int.from_bytes(signature[:32], byteorder="big")
        s = int.from_bytes(signature[32:], byteorder="big")
        try:
            self.public_key.verify(
                utils.encode_dss_signature(r, s),
                message,
                ec.ECDSA(hashes.SHA256()),
            )
            return True
        except InvalidSignature:
            return False


class PS256Verifier:
    """RSASSA-PSS SHA-256 verifier implementation.

    The PSS salt length is detected from the signature, so envelopes signed
    with either the digest-length salt or a shorter legacy salt verify.
    """

    def __init__(self, modulus: bytes, exponent: bytes):
        """Initialize PS256 verifier with the raw RSA public numbers.

        Args:
            modulus: Big-endian modulus bytes
            exponent: Big-endian public exponent bytes
        """
        n = int.from_bytes(modulus, byteorder="big")
        e = int.from_bytes(exponent, byteorder="big")
        self.public_key = rsa.RSAPublicNumbers(e, n).public_key()

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Verify a signature with PS256."""
        try:
            self.public_key.verify(
                signature,
                message,
                padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=padding.PSS.AUTO),
                hashes.SHA256(),
            )
            return True
        except InvalidSignature:
            return False


def generate_es256_key_pair() -> tuple[bytes, bytes, bytes]:
    """Generate an ES256 (ECDSA P-256) key pair.

    Returns:
        Tuple of (private_key_bytes, public_key_x, public_key_y)
    """
    private_key = ec.generate_private_key(ec.SECP256R1())
    private_key_bytes = private_key.private_numbers().private_value.to_bytes(32, byteorder="big")

    public_numbers = private_key.public_key().public_numbers()
    public_key_x = public_numbers.x.to_bytes(32, byteorder="big")
    public_key_y = public_numbers.y.to_bytes(32, byteorder="big")

    return private_key_bytes, public_key_x, public_key_y
