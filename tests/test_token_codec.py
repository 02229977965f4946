"""TokenCodec: claims, signature, issuer/audience and the expiry boundary."""

import uuid
from datetime import timedelta

import jwt
import pytest
from kungfu import Error, Ok

from storefront import StorefrontConfig
from storefront.identity import DecodeErrorKind, SessionIdentity, TokenCodec, UserType

from tests.conftest import TEST_SECRET


def decoded(result):
    match result:
        case Ok(claims):
            return claims
        case Error(e):
            pytest.fail(f"expected Ok, got {e}")


def failed(result):
    match result:
        case Ok(claims):
            pytest.fail(f"expected Error, got {claims}")
        case Error(e):
            return e


class TestIssueAndDecode:
    """Round trip of the identity claim set."""

    def test_guest_token_has_no_email(self, config, clock):
        codec = TokenCodec(config, clock)
        guid = uuid.uuid4()

        claims = decoded(codec.decode(codec.issue(SessionIdentity.guest(guid), timedelta(hours=1))))

        assert claims.subject_id == guid
        assert claims.user_type == UserType.GUEST.value
        assert claims.email is None

    def test_registered_token_carries_email(self, config, clock):
        codec = TokenCodec(config, clock)
        identity = SessionIdentity.registered(uuid.uuid4(), "ann@example.com")

        claims = decoded(codec.decode(codec.issue(identity, timedelta(hours=1))))

        assert claims.email == "ann@example.com"
        assert claims.user_type == "registered"

    def test_each_issuance_is_unique(self, config, clock):
        codec = TokenCodec(config, clock)
        identity = SessionIdentity.guest(uuid.uuid4())

        first = codec.issue(identity, timedelta(hours=1))
        second = codec.issue(identity, timedelta(hours=1))

        assert first != second
        assert decoded(codec.decode(first)).token_id != decoded(codec.decode(second)).token_id

    def test_wire_claim_names(self, config, clock):
        codec = TokenCodec(config, clock)
        token = codec.issue(SessionIdentity.registered(uuid.uuid4(), "a@b.c"), timedelta(minutes=5))

        payload = jwt.decode(token, options={"verify_signature": False})

        assert {"Guid", "UserType", "Email", "jti", "iat", "exp", "iss", "aud"} <= payload.keys()
        assert isinstance(payload["iat"], int)
        assert payload["exp"] - payload["iat"] == 300

    def test_issuer_and_audience_omitted_when_not_validated(self, clock):
        config = StorefrontConfig(
            _env_file=None,
            secret_key=TEST_SECRET,
            validate_issuer=False,
            validate_audience=False,
        )
        codec = TokenCodec(config, clock)
        token = codec.issue(SessionIdentity.guest(uuid.uuid4()), timedelta(minutes=5))

        payload = jwt.decode(token, options={"verify_signature": False})

        assert "iss" not in payload
        assert "aud" not in payload
        assert decoded(codec.decode(token)).subject_id


class TestExpiry:
    """Expiry is a hard boundary with zero skew."""

    def test_valid_one_second_before_expiry(self, config, clock):
        codec = TokenCodec(config, clock)
        token = codec.issue(SessionIdentity.guest(uuid.uuid4()), timedelta(minutes=1))

        clock.advance(seconds=59)

        assert isinstance(codec.decode(token), Ok)

    def test_expired_exactly_at_expiry(self, config, clock):
        codec = TokenCodec(config, clock)
        token = codec.issue(SessionIdentity.guest(uuid.uuid4()), timedelta(minutes=1))

        clock.advance(seconds=60)

        assert failed(codec.decode(token)).kind is DecodeErrorKind.EXPIRED

    def test_expired_token_decodes_without_expiry_validation(self, config, clock):
        codec = TokenCodec(config, clock)
        guid = uuid.uuid4()
        token = codec.issue(SessionIdentity.guest(guid), timedelta(minutes=1))

        clock.advance(days=30)

        assert decoded(codec.decode(token, validate_expiry=False)).subject_id == guid


class TestRejection:
    """Signature, issuer, audience and structure failures are typed."""

    def test_tampered_signature(self, config, clock):
        codec = TokenCodec(config, clock)
        token = codec.issue(SessionIdentity.guest(uuid.uuid4()), timedelta(minutes=5))
        head, body, signature = token.split(".")
        tampered = f"{head}.{body}.{signature[::-1]}"

        assert failed(codec.decode(tampered)).kind is DecodeErrorKind.INVALID_SIGNATURE

    def test_other_secret(self, config, clock):
        other = StorefrontConfig(_env_file=None, secret_key="another-secret-key-that-is-long-enough-00")
        token = TokenCodec(other, clock).issue(SessionIdentity.guest(uuid.uuid4()), timedelta(minutes=5))

        error = failed(TokenCodec(config, clock).decode(token))

        assert error.kind is DecodeErrorKind.INVALID_SIGNATURE

    def test_signature_checked_even_without_expiry_validation(self, config, clock):
        other = StorefrontConfig(_env_file=None, secret_key="another-secret-key-that-is-long-enough-00")
        token = TokenCodec(other, clock).issue(SessionIdentity.guest(uuid.uuid4()), timedelta(minutes=5))

        error = failed(TokenCodec(config, clock).decode(token, validate_expiry=False))

        assert error.kind is DecodeErrorKind.INVALID_SIGNATURE

    def test_wrong_issuer(self, config, clock):
        other = StorefrontConfig(_env_file=None, secret_key=TEST_SECRET, valid_issuer="Someone-Else")
        token = TokenCodec(other, clock).issue(SessionIdentity.guest(uuid.uuid4()), timedelta(minutes=5))

        assert failed(TokenCodec(config, clock).decode(token)).kind is DecodeErrorKind.INVALID_ISSUER

    def test_wrong_audience(self, config, clock):
        other = StorefrontConfig(_env_file=None, secret_key=TEST_SECRET, valid_audience="Other-App")
        token = TokenCodec(other, clock).issue(SessionIdentity.guest(uuid.uuid4()), timedelta(minutes=5))

        assert failed(TokenCodec(config, clock).decode(token)).kind is DecodeErrorKind.INVALID_AUDIENCE

    def test_garbage(self, config, clock):
        assert failed(TokenCodec(config, clock).decode("not-a-token")).kind is DecodeErrorKind.MALFORMED

    def test_missing_guid_claim(self, config, clock):
        token = jwt.encode(
            {
                "jti": "x",
                "iat": int(clock().timestamp()),
                "exp": int(clock().timestamp()) + 60,
                "iss": config.valid_issuer,
                "aud": config.valid_audience,
            },
            TEST_SECRET,
            algorithm="HS256",
        )

        assert failed(TokenCodec(config, clock).decode(token)).kind is DecodeErrorKind.MALFORMED
