"""Pytest configuration and shared fixtures for HCERT codec tests."""

from datetime import datetime, timedelta, timezone
from types import MappingProxyType

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID

from hcert import cbor_utils


def _self_signed_certificate(private_key, common_name: str) -> str:
    """Build a self-signed PEM certificate for the given key."""
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.COUNTRY_NAME, "AT"),
            x509.NameAttribute(NameOID.COMMON_NAME, common_name),
        ]
    )
    now = datetime.now(timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=365))
        .sign(private_key, hashes.SHA256())
    )
    return certificate.public_bytes(serialization.Encoding.PEM).decode("ascii")


def _pkcs8_pem(private_key) -> str:
    return private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture(scope="session")
def ec_private_key() -> ec.EllipticCurvePrivateKey:
    """EC P-256 issuer key."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def ec_certificate_pem(ec_private_key) -> str:
    """Self-signed DSC certificate for the EC issuer key."""
    return _self_signed_certificate(ec_private_key, "DSC EC Test")


@pytest.fixture(scope="session")
def ec_private_key_pem(ec_private_key) -> str:
    """PKCS8 PEM of the EC issuer key."""
    return _pkcs8_pem(ec_private_key)


@pytest.fixture(scope="session")
def other_ec_certificate_pem() -> str:
    """Certificate of an unrelated EC key."""
    return _self_signed_certificate(ec.generate_private_key(ec.SECP256R1()), "DSC EC Other")


@pytest.fixture(scope="session")
def p384_certificate_pem() -> str:
    """Certificate on a curve other than P-256."""
    return _self_signed_certificate(ec.generate_private_key(ec.SECP384R1()), "DSC P-384")


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """RSA-2048 issuer key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_certificate_pem(rsa_private_key) -> str:
    """Self-signed DSC certificate for the RSA issuer key."""
    return _self_signed_certificate(rsa_private_key, "DSC RSA Test")


@pytest.fixture(scope="session")
def rsa_private_key_pem(rsa_private_key) -> str:
    """PKCS8 PEM of the RSA issuer key."""
    return _pkcs8_pem(rsa_private_key)


@pytest.fixture
def hcert_payload() -> dict:
    """Minimal health certificate content; the codec never inspects it."""
    return {
        "ver": "1.3.0",
        "nam": {"fn": "Doe", "gn": "John", "fnt": "DOE", "gnt": "JOHN"},
        "dob": "1990-01-01",
        "v": [
            {
                "tg": "840539006",
                "vp": "1119349007",
                "mp": "EU/1/20/1528",
                "dn": 2,
                "sd": 2,
                "dt": "2021-05-29",
                "co": "AT",
                "ci": "URN:UVCI:01:AT:10807843F94AEE0EE5093FBC254BD813#B",
            }
        ],
    }


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed issuance time for deterministic claims."""
    return datetime(2021, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def _freeze(value):
    if cbor_utils.is_array(value):
        return tuple(_freeze(item) for item in value)
    if cbor_utils.is_map(value):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if cbor_utils.is_tag(value):
        return cbor_utils.create_tag(cbor_utils.get_tag_number(value), _freeze(cbor_utils.get_tag_value(value)))
    return value


@pytest.fixture
def frozen_decode(monkeypatch):
    """Make decoding yield tuples and read-only maps, as newer cbor2 releases do."""
    decode = cbor_utils.decode
    monkeypatch.setattr(cbor_utils, "decode", lambda data: _freeze(decode(data)))


def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: full issue and verify workflows")
