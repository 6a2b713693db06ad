"""Unit tests for auth/codec.py — token encoding and decoding."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt
from pydantic import BaseModel

from tokenware.auth.codec import decode_token, encode_token, get_unverified_claims
from tokenware.config import TokenConfig
from tokenware.errors import (
    ExpiredTokenError,
    InvalidSignatureError,
    MalformedTokenError,
    SigningError,
    UnexpectedAlgorithmError,
)
from tests.helpers.token_factory import (
    TEST_SIGNING_KEY,
    b64url,
    b64url_json,
    exp_in,
    make_expired_token,
    make_token,
    make_unsigned_token,
    replace_header,
)

FIXED_NOW = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


class UserIdentity(BaseModel):
    user_id: int
    email: str


class TestEncodeToken:
    """Tests for token issuance."""

    def test_returns_three_segment_string(self, config):
        token = encode_token("user-123", config)
        assert isinstance(token, str)
        assert token.count(".") == 2

    def test_header_declares_configured_algorithm(self, config):
        header = jwt.get_unverified_header(encode_token("user-123", config))
        assert header["alg"] == "HS256"
        assert header["typ"] == "JWT"

    def test_claims_hold_identity_and_exp_only(self, config):
        token = encode_token("user-123", config)
        claims = jwt.get_unverified_claims(token)
        assert set(claims) == {"id", "exp"}
        assert claims["id"] == "user-123"

    def test_exp_is_now_plus_time_to_live(self, config):
        token = encode_token("user-123", config, now=FIXED_NOW)
        claims = jwt.get_unverified_claims(token)
        assert claims["exp"] == int((FIXED_NOW + timedelta(hours=72)).timestamp())
        assert isinstance(claims["exp"], int)

    def test_custom_identity_claim_and_ttl(self):
        config = TokenConfig(
            signing_key=TEST_SIGNING_KEY,
            identity_claim="sub",
            time_to_live=timedelta(minutes=5),
        )
        token = encode_token("user-9", config, now=FIXED_NOW)
        claims = jwt.get_unverified_claims(token)
        assert claims["sub"] == "user-9"
        assert "id" not in claims
        assert claims["exp"] == int(FIXED_NOW.timestamp()) + 300

    def test_hs512_config(self):
        config = TokenConfig(signing_key=TEST_SIGNING_KEY, algorithm="HS512")
        token = encode_token("user-1", config)
        assert jwt.get_unverified_header(token)["alg"] == "HS512"
        assert decode_token(token, config)["id"] == "user-1"

    def test_pydantic_identity_is_dumped_as_json(self, config):
        token = encode_token(UserIdentity(user_id=7, email="a@test.com"), config)
        claims = decode_token(token, config)
        assert claims["id"] == {"user_id": 7, "email": "a@test.com"}

    def test_asymmetric_key_raises_signing_error(self):
        config = TokenConfig(signing_key=b"-----BEGIN PUBLIC KEY-----\nMIIBIjANBgkqhkiG9w0BAQEFAAOCAQ8A\n-----END PUBLIC KEY-----\n")

        with pytest.raises(SigningError) as exc:
            encode_token("user-1", config)
        assert exc.value.__cause__ is not None

    def test_unserialisable_identity_raises_signing_error(self, config):
        with pytest.raises(SigningError):
            encode_token(object(), config)


class TestDecodeToken:
    """Tests for token verification."""

    @pytest.mark.parametrize(
        "identity",
        ["user-abc", 42, {"user_id": 1, "roles": ["admin"]}, ["a", "b"], None],
    )
    def test_round_trip_preserves_identity(self, config, identity):
        claims = decode_token(encode_token(identity, config), config)
        assert claims["id"] == identity
        assert "exp" in claims

    def test_returns_all_claims(self, config):
        token = make_token({"id": "user-1", "exp": exp_in(timedelta(hours=1)), "role": "admin"})
        claims = decode_token(token, config)
        assert claims["role"] == "admin"

    def test_accepts_tokens_from_other_hmac_variants(self, config):
        token = make_token({"id": "user-1", "exp": exp_in(timedelta(hours=1))}, algorithm="HS384")
        assert decode_token(token, config)["id"] == "user-1"

    def test_expired_token_raises(self, config):
        with pytest.raises(ExpiredTokenError):
            decode_token(make_expired_token("user-1"), config)

    def test_expired_token_with_bad_signature_still_reports_expired(self, config):
        token = make_expired_token("user-1", key="some-completely-different-signing-key")
        with pytest.raises(ExpiredTokenError):
            decode_token(token, config)

    def test_exp_equal_to_now_is_expired(self, config):
        token = encode_token("user-1", config, now=FIXED_NOW)
        expires_at = FIXED_NOW + config.time_to_live

        assert decode_token(token, config, now=expires_at - timedelta(seconds=1))["id"] == "user-1"
        with pytest.raises(ExpiredTokenError):
            decode_token(token, config, now=expires_at)

    def test_wrong_key_raises_invalid_signature(self, config, other_config):
        token = encode_token("user-1", config)
        with pytest.raises(InvalidSignatureError):
            decode_token(token, other_config)

    def test_tampered_payload_raises_invalid_signature(self, config):
        token = encode_token("user-1", config)
        header, _, signature = token.split(".")
        forged = b64url_json({"id": "admin", "exp": exp_in(timedelta(hours=1))})
        with pytest.raises(InvalidSignatureError):
            decode_token(f"{header}.{forged}.{signature}", config)

    def test_tampered_signature_raises_invalid_signature(self, config):
        token = encode_token("user-1", config)
        header, payload, _ = token.split(".")
        with pytest.raises(InvalidSignatureError):
            decode_token(f"{header}.{payload}.{b64url(b'x' * 32)}", config)

    @pytest.mark.parametrize("algorithm", ["none", "None", "RS256", "ES256", "PS512"])
    def test_non_hmac_algorithm_raises(self, config, algorithm):
        token = make_unsigned_token({"id": "admin", "exp": exp_in(timedelta(hours=1))}, algorithm)
        with pytest.raises(UnexpectedAlgorithmError) as exc:
            decode_token(token, config)
        assert exc.value.algorithm == algorithm

    def test_header_swapped_to_rs256_raises(self, config):
        token = replace_header(encode_token("user-1", config), {"alg": "RS256", "typ": "JWT"})
        with pytest.raises(UnexpectedAlgorithmError):
            decode_token(token, config)

    @pytest.mark.parametrize("header", [{"typ": "JWT"}, {"alg": ["HS256"]}, {"alg": None}])
    def test_missing_or_invalid_alg_raises(self, config, header):
        token = replace_header(encode_token("user-1", config), header)
        with pytest.raises(UnexpectedAlgorithmError):
            decode_token(token, config)

    @pytest.mark.parametrize(
        "token",
        [
            "",
            "not-a-token",
            "only.two",
            "not.a.valid.jwt",
            "!!!.@@@.###",
            f"{b64url(b'not json')}.{b64url_json({'id': 1})}.",
            f"{b64url_json(['alg'])}.{b64url_json({'id': 1})}.",
        ],
    )
    def test_structurally_invalid_token_raises_malformed(self, config, token):
        with pytest.raises(MalformedTokenError):
            decode_token(token, config)

    def test_non_string_token_raises_malformed(self, config):
        with pytest.raises(MalformedTokenError):
            decode_token(None, config)  # type: ignore[arg-type]

    def test_payload_not_an_object_raises_malformed(self, config):
        header = b64url_json({"alg": "HS256", "typ": "JWT"})
        token = f"{header}.{b64url_json([1, 2, 3])}.{b64url(b'sig')}"
        with pytest.raises(MalformedTokenError):
            decode_token(token, config)

    @pytest.mark.parametrize("exp", [None, "tomorrow", True])
    def test_missing_or_non_numeric_exp_raises_malformed(self, config, exp):
        claims = {"id": "user-1"} if exp is None else {"id": "user-1", "exp": exp}
        with pytest.raises(MalformedTokenError):
            decode_token(make_token(claims), config)

    @pytest.mark.parametrize("exp", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_exp_raises_malformed(self, config, exp):
        token = make_token({"id": "user-1", "exp": exp})
        with pytest.raises(MalformedTokenError):
            decode_token(token, config)

    def test_far_future_integer_exp_is_accepted(self, config):
        token = make_token({"id": "user-1", "exp": 10**400})
        assert decode_token(token, config)["id"] == "user-1"

    def test_repeated_decode_is_idempotent(self, config):
        token = encode_token({"user_id": 3}, config)
        assert decode_token(token, config) == decode_token(token, config)


class TestGetUnverifiedClaims:
    def test_reads_claims_without_key(self, config):
        token = encode_token("user-1", config)
        assert get_unverified_claims(token)["id"] == "user-1"

    def test_garbage_raises_malformed(self):
        with pytest.raises(MalformedTokenError):
            get_unverified_claims("garbage")
