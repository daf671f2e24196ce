"""hcert: envelope codec for Digital Covid/Health Certificates (HC1 tokens)."""

# Hide module imports
from . import cwt, envelope, errors, key_params, resolvers, signers, transport, verifiers
from .cose_sign1 import (
    Signer,
    Verifier,
    algorithm_name,
    cose_sign1_sign,
    cose_sign1_verify,
)
from .cwt import make_cwt, parse_cwt
from .debug import debug, diagnostic, expand
from .envelope import HeaderInfo, extract_header_info, sign, verify, verify_and_return_payload
from .errors import (
    HCertError,
    KeyNotFoundError,
    MalformedCertificateError,
    MalformedPrivateKeyError,
    MalformedTokenError,
    MissingHealthClaimError,
    SignatureInvalidError,
    UnreadableEnvelopeError,
    UnrecognizedEncodingError,
    UnsupportedAlgorithmError,
)
from .key_params import (
    EcKeyParameters,
    KeyParameters,
    RsaKeyParameters,
    derive_from_certificate,
    derive_private_from_key,
)
from .resolvers import KeyResolver, certificate_kid_resolver, mapping_resolver
from .signers import CertificateSigner, create_certificate_signer
from .transport import (
    TransportEncoding,
    detect_encoding,
    pack,
    pack32,
    pack45,
    sign_and_pack,
    sign_and_pack32,
    sign_and_pack45,
    unpack,
    unpack_and_verify,
)
from .verifiers import create_verifier

del cwt, envelope, errors, key_params, resolvers, signers, transport, verifiers

__version__ = "0.1.0"


__all__ = [
    "__version__",
    # COSE Sign1 primitive
    "cose_sign1_sign",
    "cose_sign1_verify",
    "algorithm_name",
    "Signer",
    "Verifier",
    # Key parameter derivation
    "KeyParameters",
    "RsaKeyParameters",
    "EcKeyParameters",
    "derive_from_certificate",
    "derive_private_from_key",
    # CWT claims
    "make_cwt",
    "parse_cwt",
    # Envelope signing and verification
    "HeaderInfo",
    "sign",
    "extract_header_info",
    "verify_and_return_payload",
    "verify",
    "CertificateSigner",
    "create_certificate_signer",
    "create_verifier",
    # Key resolution
    "KeyResolver",
    "certificate_kid_resolver",
    "mapping_resolver",
    # Transport
    "TransportEncoding",
    "detect_encoding",
    "pack",
    "pack32",
    "pack45",
    "sign_and_pack",
    "sign_and_pack32",
    "sign_and_pack45",
    "unpack",
    "unpack_and_verify",
    # Debugging
    "expand",
    "debug",
    "diagnostic",
    # Errors
    "HCertError",
    "MalformedTokenError",
    "UnrecognizedEncodingError",
    "MalformedCertificateError",
    "MalformedPrivateKeyError",
    "UnsupportedAlgorithmError",
    "UnreadableEnvelopeError",
    "KeyNotFoundError",
    "SignatureInvalidError",
    "MissingHealthClaimError",
]
