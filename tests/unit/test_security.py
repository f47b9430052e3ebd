"""Unit tests for JWT helpers."""

import jwt
import pytest

from canvass_api.core.security import create_access_token, decode_token

_SECRET = "test-secret-key-that-is-at-least-32-characters-long"


class TestTokens:
    def test_round_trip_claims(self) -> None:
        token = create_access_token("canvasser", "volunteer", _SECRET)
        payload = decode_token(token, _SECRET)
        assert payload["sub"] == "canvasser"
        assert payload["role"] == "volunteer"
        assert payload["type"] == "access"

    def test_wrong_secret_rejected(self) -> None:
        token = create_access_token("canvasser", "volunteer", _SECRET)
        with pytest.raises(jwt.InvalidTokenError):
            decode_token(token, "another-secret-key-that-is-at-least-32-chars")

    def test_expired_token_rejected(self) -> None:
        token = create_access_token("canvasser", "volunteer", _SECRET, expires_minutes=-1)
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_token(token, _SECRET)
