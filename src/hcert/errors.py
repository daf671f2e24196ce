"""Exception hierarchy for the HCERT codec."""


class HCertError(ValueError):
    """Base class for all codec errors."""


class MalformedTokenError(HCertError):
    """The token text cannot be turned back into envelope bytes."""


class UnrecognizedEncodingError(MalformedTokenError):
    """The token body matches neither the Base32 nor the Base45 alphabet."""


class MalformedCertificateError(HCertError):
    """The certificate cannot be parsed or its key material is too short."""


class MalformedPrivateKeyError(HCertError):
    """The private key cannot be parsed or its key material is too short."""


class UnsupportedAlgorithmError(HCertError):
    """The key type or curve is not usable for this operation.

    Verification accepts RSA and EC P-256 certificates, issuance only EC P-256.
    """


class UnreadableEnvelopeError(HCertError):
    """The bytes do not hold a four element COSE_Sign1 structure."""


class KeyNotFoundError(HCertError):
    """Neither the resolver nor the fallback certificate supplied a key."""


class SignatureInvalidError(HCertError):
    """The envelope signature does not verify under the selected key."""


class MissingHealthClaimError(HCertError):
    """The claims lack the nested health certificate claim."""
