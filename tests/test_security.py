from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.core.config import settings
from app.core.exceptions import TokenExpired, TokenInvalid
from app.core.security import SessionIssuer
from app.services.messages import Role

TEST_SECRET = settings.jwt_secret

WALLET = "0xabcdef0123456789abcdef0123456789abcdef01"
PRINCIPAL_ID = "4f6c1d9e-1b2a-4c3d-8e9f-0a1b2c3d4e5f"


def claims_at(now, **overrides):
    claims = {
        "sub": PRINCIPAL_ID,
        "wallet_address": WALLET,
        "role": "investor",
        "iss": "ownafarm",
        "iat": now,
        "nbf": now,
        "exp": now + timedelta(hours=1),
    }
    claims.update(overrides)
    return claims


class TestSessionIssuer:
    """Tests for minting and parsing session tokens"""

    def test_mint_and_parse_investor(self, session_issuer):
        # Act
        token = session_issuer.mint(PRINCIPAL_ID, WALLET, Role.INVESTOR)
        claims = session_issuer.parse(token, Role.INVESTOR)

        # Assert
        assert claims.principal_id == PRINCIPAL_ID
        assert claims.wallet_address == WALLET
        assert claims.role is Role.INVESTOR
        assert claims.iss == "ownafarm"
        assert claims.admin_role is None
        assert claims.exp - claims.iat == 24 * 3600
        assert claims.nbf == claims.iat

    def test_header_is_hs256(self, session_issuer):
        token = session_issuer.mint(PRINCIPAL_ID, WALLET, Role.FARMER)
        assert jwt.get_unverified_header(token)["alg"] == "HS256"

    def test_admin_token(self, session_issuer):
        token = session_issuer.mint(PRINCIPAL_ID, WALLET, Role.ADMIN, admin_role="super_admin")

        claims = session_issuer.parse(token, Role.ADMIN)

        assert claims.iss == "ownafarm-admin"
        assert claims.admin_role == "super_admin"

    def test_admin_role_only_for_admins(self, session_issuer):
        token = session_issuer.mint(PRINCIPAL_ID, WALLET, Role.INVESTOR, admin_role="super_admin")
        payload = jwt.decode(token, TEST_SECRET, algorithms=["HS256"], issuer="ownafarm")
        assert "admin_role" not in payload

    def test_admin_token_rejected_for_investor(self, session_issuer):
        token = session_issuer.mint(PRINCIPAL_ID, WALLET, Role.ADMIN, admin_role="admin")
        with pytest.raises(TokenInvalid):
            session_issuer.parse(token, Role.INVESTOR)

    def test_investor_token_rejected_for_admin(self, session_issuer):
        token = session_issuer.mint(PRINCIPAL_ID, WALLET, Role.INVESTOR)
        with pytest.raises(TokenInvalid):
            session_issuer.parse(token, Role.ADMIN)

    def test_farmer_token_rejected_for_investor(self, session_issuer):
        """Same issuer, different role claim"""
        token = session_issuer.mint(PRINCIPAL_ID, WALLET, Role.FARMER)
        with pytest.raises(TokenInvalid):
            session_issuer.parse(token, Role.INVESTOR)

    def test_expired_token(self, session_issuer):
        issued = datetime.now(timezone.utc) - timedelta(hours=25)
        token = session_issuer.mint(PRINCIPAL_ID, WALLET, Role.INVESTOR, now=issued)

        with pytest.raises(TokenExpired):
            session_issuer.parse(token, Role.INVESTOR)

    def test_wrong_secret(self, session_issuer):
        other = SessionIssuer(secret="another-secret-key-that-is-long-enough-000")
        token = other.mint(PRINCIPAL_ID, WALLET, Role.INVESTOR)

        with pytest.raises(TokenInvalid):
            session_issuer.parse(token, Role.INVESTOR)

    def test_other_hmac_algorithm_rejected(self, session_issuer):
        token = jwt.encode(claims_at(datetime.now(timezone.utc)), TEST_SECRET, algorithm="HS512")

        with pytest.raises(TokenInvalid):
            session_issuer.parse(token, Role.INVESTOR)

    def test_unsigned_token_rejected(self, session_issuer):
        token = jwt.encode(claims_at(datetime.now(timezone.utc)), None, algorithm="none")

        with pytest.raises(TokenInvalid):
            session_issuer.parse(token, Role.INVESTOR)

    def test_missing_required_claim(self, session_issuer):
        claims = claims_at(datetime.now(timezone.utc))
        del claims["nbf"]
        token = jwt.encode(claims, TEST_SECRET, algorithm="HS256")

        with pytest.raises(TokenInvalid):
            session_issuer.parse(token, Role.INVESTOR)

    def test_missing_role_claim(self, session_issuer):
        claims = claims_at(datetime.now(timezone.utc))
        del claims["role"]
        token = jwt.encode(claims, TEST_SECRET, algorithm="HS256")

        with pytest.raises(TokenInvalid):
            session_issuer.parse(token, Role.INVESTOR)

    def test_wrong_issuer(self, session_issuer):
        token = jwt.encode(claims_at(datetime.now(timezone.utc), iss="someone-else"), TEST_SECRET, algorithm="HS256")

        with pytest.raises(TokenInvalid):
            session_issuer.parse(token, Role.INVESTOR)

    def test_not_yet_valid(self, session_issuer):
        now = datetime.now(timezone.utc)
        token = jwt.encode(claims_at(now, nbf=now + timedelta(hours=1)), TEST_SECRET, algorithm="HS256")

        with pytest.raises(TokenInvalid):
            session_issuer.parse(token, Role.INVESTOR)

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed_token(self, session_issuer, token):
        with pytest.raises(TokenInvalid):
            session_issuer.parse(token, Role.INVESTOR)

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError):
            SessionIssuer(secret="")

    def test_non_hs256_refused(self):
        with pytest.raises(ValueError):
            SessionIssuer(secret=TEST_SECRET, algorithm="RS256")
