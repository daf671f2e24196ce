"""Tests for the COSE Sign1 primitive."""

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from hcert import algorithm_name, cbor_utils, cose_sign1_sign, cose_sign1_verify
from hcert.cose_sign1 import (
    COSE_ALG_PS256,
    ES256Signer,
    ES256Verifier,
    PS256Verifier,
    generate_es256_key_pair,
)


class PS256TestSigner:
    """RSASSA-PSS signer used to produce envelopes from RSA issuers."""

    def __init__(self, private_key, salt_length: int = 32):
        self.private_key = private_key
        self.salt_length = salt_length

    def sign(self, message: bytes) -> bytes:
        return self.private_key.sign(
            message,
            padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=self.salt_length),
            hashes.SHA256(),
        )

    @property
    def algorithm(self) -> int:
        return COSE_ALG_PS256


def _ps256_verifier(rsa_private_key) -> PS256Verifier:
    numbers = rsa_private_key.public_key().public_numbers()
    return PS256Verifier(numbers.n.to_bytes(256, "big"), numbers.e.to_bytes(3, "big"))


class TestES256:
    """ECDSA signing and verification."""

    def test_generate_sign_verify_flow(self) -> None:
        private_key, public_x, public_y = generate_es256_key_pair()
        assert len(private_key) == 32
        assert len(public_x) == 32
        assert len(public_y) == 32

        message = cose_sign1_sign(b"Hello, HCERT!", ES256Signer(private_key))
        is_valid, payload = cose_sign1_verify(message, ES256Verifier(public_x, public_y))

        assert is_valid
        assert payload == b"Hello, HCERT!"

    def test_algorithm_added_to_protected_header(self) -> None:
        private_key, _, _ = generate_es256_key_pair()
        message = cose_sign1_sign(b"payload", ES256Signer(private_key), protected_header={4: b"kid12345"})

        tagged = cbor_utils.decode(message)
        assert cbor_utils.get_tag_number(tagged) == 18
        protected = cbor_utils.decode(cbor_utils.get_tag_value(tagged)[0])
        assert protected == {4: b"kid12345", 1: -7}

    def test_caller_header_not_mutated(self) -> None:
        private_key, _, _ = generate_es256_key_pair()
        header = {4: b"kid12345"}
        cose_sign1_sign(b"payload", ES256Signer(private_key), protected_header=header)
        assert header == {4: b"kid12345"}

    def test_external_aad(self) -> None:
        private_key, public_x, public_y = generate_es256_key_pair()
        verifier = ES256Verifier(public_x, public_y)
        message = cose_sign1_sign(b"payload", ES256Signer(private_key), external_aad=b"context")

        assert cose_sign1_verify(message, verifier, external_aad=b"context")[0]
        assert not cose_sign1_verify(message, verifier, external_aad=b"other")[0]

    def test_wrong_key_fails(self) -> None:
        private_key, _, _ = generate_es256_key_pair()
        _, other_x, other_y = generate_es256_key_pair()

        message = cose_sign1_sign(b"payload", ES256Signer(private_key))
        assert cose_sign1_verify(message, ES256Verifier(other_x, other_y)) == (False, None)

    def test_untagged_message_accepted(self) -> None:
        private_key, public_x, public_y = generate_es256_key_pair()
        message = cose_sign1_sign(b"payload", ES256Signer(private_key))
        untagged = cbor_utils.encode(cbor_utils.get_tag_value(cbor_utils.decode(message)))

        assert cose_sign1_verify(untagged, ES256Verifier(public_x, public_y)) == (True, b"payload")

    def test_other_tag_rejected(self) -> None:
        private_key, public_x, public_y = generate_es256_key_pair()
        message = cose_sign1_sign(b"payload", ES256Signer(private_key))
        retagged = cbor_utils.encode(
            cbor_utils.create_tag(98, cbor_utils.get_tag_value(cbor_utils.decode(message)))
        )

        assert cose_sign1_verify(retagged, ES256Verifier(public_x, public_y)) == (False, None)

    @pytest.mark.parametrize("garbage", [b"", b"\xff\xff", cbor_utils.encode([1, 2, 3])])
    def test_garbage_rejected(self, garbage) -> None:
        _, public_x, public_y = generate_es256_key_pair()
        assert cose_sign1_verify(garbage, ES256Verifier(public_x, public_y)) == (False, None)

    def test_short_signature_rejected(self) -> None:
        _, public_x, public_y = generate_es256_key_pair()
        assert not ES256Verifier(public_x, public_y).verify(b"message", b"\x00" * 63)


class TestPS256:
    """RSASSA-PSS verification."""

    @pytest.mark.parametrize("salt_length", [32, 20])
    def test_verify_salt_lengths(self, rsa_private_key, salt_length) -> None:
        message = cose_sign1_sign(b"payload", PS256TestSigner(rsa_private_key, salt_length))
        assert cose_sign1_verify(message, _ps256_verifier(rsa_private_key)) == (True, b"payload")

    def test_tampered_payload_fails(self, rsa_private_key) -> None:
        message = cose_sign1_sign(b"payload", PS256TestSigner(rsa_private_key))
        items = list(cbor_utils.get_tag_value(cbor_utils.decode(message)))
        items[2] = b"PAYLOAD"
        tampered = cbor_utils.encode(cbor_utils.create_tag(18, items))

        assert cose_sign1_verify(tampered, _ps256_verifier(rsa_private_key)) == (False, None)


class TestAlgorithmName:
    """COSE algorithm identifier names."""

    @pytest.mark.parametrize(
        "alg,name",
        [(-7, "ES256"), (-37, "PS256"), ("ES256", "ES256"), (-35, None), (None, None), ([1], None)],
    )
    def test_algorithm_name(self, alg, name) -> None:
        assert algorithm_name(alg) == name
