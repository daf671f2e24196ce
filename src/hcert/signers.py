"""Signers driven by an issuer certificate and its private key."""

from typing import Union

from .cose_sign1 import ES256Signer
from .key_params import EcKeyParameters, derive_signing_parameters


class CertificateSigner:
    """Signs HCERT envelopes with the EC key belonging to a certificate.

    RSA certificates are rejected: issuance is ES256 only, while
    verification also accepts PS256.
    """

    def __init__(self, certificate_pem: Union[str, bytes], private_key_pem: Union[str, bytes]):
        """Initialize signer from PEM certificate and PKCS8 private key.

        Raises:
            UnsupportedAlgorithmError: If certificate or key are not EC P-256
            MalformedCertificateError: If the certificate cannot be used
            MalformedPrivateKeyError: If the private key cannot be used
        """
        self.key_params: EcKeyParameters = derive_signing_parameters(certificate_pem, private_key_pem)
        self._signer = ES256Signer(self.key_params.d)  # type: ignore[arg-type]

    @property
    def key_id(self) -> bytes:
        return self.key_params.key_id

    def sign(self, message: bytes) -> bytes:
        return self._signer.sign(message)

    @property
    def algorithm(self) -> int:
        return self._signer.algorithm


def create_certificate_signer(
    certificate_pem: Union[str, bytes], private_key_pem: Union[str, bytes]
) -> CertificateSigner:
    """Create a certificate signer from PEM inputs."""
    return CertificateSigner(certificate_pem, private_key_pem)
