#!/usr/bin/env python3
"""Demo script: issue an HC1 token and verify it again."""

import logging
from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from hcert import (
    certificate_kid_resolver,
    debug,
    extract_header_info,
    make_cwt,
    parse_cwt,
    sign_and_pack,
    unpack,
    unpack_and_verify,
)


def create_test_issuer() -> tuple[str, str]:
    """Create a throwaway document signer certificate and PKCS8 key."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "Demo DSC")])
    now = datetime.now(timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=30))
        .sign(private_key, hashes.SHA256())
    )
    certificate_pem = certificate.public_bytes(serialization.Encoding.PEM).decode("ascii")
    private_key_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("ascii")
    return certificate_pem, private_key_pem


def main():
    logging.basicConfig(level=logging.INFO)

    print("=" * 60)
    print("HC1 Token Demo")
    print("=" * 60)

    certificate_pem, private_key_pem = create_test_issuer()

    print("\n1. Building claims...")
    claims = make_cwt({"nam": {"fn": "Doe", "gn": "John"}, "dob": "1990-01-01"}, 12, "AT")
    print(f"   Claims: {claims}")

    print("\n2. Signing and packing...")
    token = sign_and_pack(claims, certificate_pem, private_key_pem)
    print(f"   Token ({len(token)} chars): {token[:60]}...")

    print("\n3. Reading headers without verification...")
    info = extract_header_info(unpack(token))
    print(f"   alg={info.alg} kid={info.key_id.hex() if info.key_id else None} iss={info.issuer}")

    print("\n4. Verifying against a trust list...")
    resolver = certificate_kid_resolver([certificate_pem])
    verified = unpack_and_verify(token, resolver=resolver)
    if verified is not None:
        print(f"   ✓ Valid, payload: {parse_cwt(verified)}")
    else:
        print("   ✗ Verification failed!")

    print("\n5. Debug view:")
    print(f"   {debug(token)}")


if __name__ == "__main__":
    main()
