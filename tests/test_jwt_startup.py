"""
tests/test_jwt_startup — JWT Secret Validation at Startup
===========================================================
The API must refuse to start when JWT_SECRET is missing, blank, too short,
or a known weak default.
"""

from __future__ import annotations

import importlib
import os
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import jwt
import pytest

from kaabhub.errors import AuthenticationError


class TestJWTSecretValidation:
    """Prove that _load_jwt_secret() rejects bad secrets and accepts good ones."""

    def _call_load(self) -> str:
        """Re-import the validator so it runs fresh against patched env."""
        import kaabhub.api.deps as deps_mod
        importlib.reload(deps_mod)
        return deps_mod.JWT_SECRET

    def test_rejects_missing_secret(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("JWT_SECRET", None)
            with pytest.raises(RuntimeError, match="JWT_SECRET environment variable is not set"):
                self._call_load()

    def test_rejects_empty_secret(self):
        with patch.dict(os.environ, {"JWT_SECRET": ""}):
            with pytest.raises(RuntimeError, match="JWT_SECRET environment variable is not set"):
                self._call_load()

    def test_rejects_known_weak_default(self):
        with patch.dict(os.environ, {"JWT_SECRET": "kaabhub-dev-secret-change-me"}):
            with pytest.raises(RuntimeError, match="known weak default"):
                self._call_load()

    def test_rejects_short_secret(self):
        with patch.dict(os.environ, {"JWT_SECRET": "tooshort"}):
            with pytest.raises(RuntimeError, match="too short"):
                self._call_load()

    def test_accepts_strong_secret(self):
        good_secret = "a" * 64
        with patch.dict(os.environ, {"JWT_SECRET": good_secret}):
            assert self._call_load() == good_secret

    @pytest.fixture(autouse=True)
    def _restore_jwt_secret(self):
        """Ensure JWT_SECRET is restored after each test so other tests work."""
        original = os.environ.get("JWT_SECRET")
        yield
        if original is not None:
            os.environ["JWT_SECRET"] = original
        else:
            os.environ.pop("JWT_SECRET", None)
        import kaabhub.api.deps as deps_mod
        try:
            importlib.reload(deps_mod)
        except RuntimeError:
            pass  # test env may not have a valid secret set yet


class TestTokens:
    def test_round_trip(self):
        from kaabhub.api.deps import decode_token, issue_token

        assert decode_token(issue_token(42)) == 42

    def test_expired_token_rejected(self):
        from kaabhub.api.deps import JWT_ALGORITHM, JWT_SECRET, decode_token

        token = jwt.encode(
            {"sub": "42", "exp": datetime.now(UTC) - timedelta(minutes=1)},
            JWT_SECRET,
            algorithm=JWT_ALGORITHM,
        )
        with pytest.raises(AuthenticationError, match="Invalid token"):
            decode_token(token)

    def test_wrong_signature_rejected(self):
        from kaabhub.api.deps import JWT_ALGORITHM, decode_token

        token = jwt.encode({"sub": "42"}, "z" * 64, algorithm=JWT_ALGORITHM)
        with pytest.raises(AuthenticationError):
            decode_token(token)

    def test_non_numeric_subject_rejected(self):
        from kaabhub.api.deps import JWT_ALGORITHM, JWT_SECRET, decode_token

        token = jwt.encode({"sub": "abc"}, JWT_SECRET, algorithm=JWT_ALGORITHM)
        with pytest.raises(AuthenticationError):
            decode_token(token)
