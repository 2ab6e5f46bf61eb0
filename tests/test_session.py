"""
Test suite for the admin session
Tests: token persistence, expiry, claims
"""
from datetime import datetime, timedelta, timezone

from jose import jwt

from admin_console.session import MemoryTokenStore, Session, TokenStore, is_expired, token_claims


def make_token(**claims):
    return jwt.encode(claims, "test-secret", algorithm="HS256")


class TestTokenStore:
    """Token file on disk"""

    def test_missing_file(self, tmp_path):
        """Test a missing file means no token"""
        assert TokenStore(tmp_path / "token.json").load() is None

    def test_save_load_clear(self, tmp_path):
        """Test the token survives a new store instance"""
        path = tmp_path / "nested" / "token.json"
        TokenStore(path).save("abc")
        assert TokenStore(path).load() == "abc"
        TokenStore(path).clear()
        assert not path.exists()
        TokenStore(path).clear()

    def test_unreadable_file_is_ignored(self, tmp_path):
        """Test a corrupt file is treated as no token"""
        path = tmp_path / "token.json"
        path.write_text("{not json")
        assert TokenStore(path).load() is None


class TestSession:
    """Session lifecycle"""

    def test_expired_token_is_discarded(self):
        """Test an expired stored token is cleared on startup"""
        store = MemoryTokenStore(make_token(sub="1", exp=datetime.now(timezone.utc) - timedelta(minutes=1)))
        session = Session(store)
        assert not session.is_authenticated
        assert store.token is None

    def test_valid_token_is_kept(self, tmp_path):
        """Test a live token is picked up from the token file"""
        token = make_token(sub="1", is_admin=True, exp=datetime.now(timezone.utc) + timedelta(days=1))
        TokenStore(tmp_path / "token.json").save(token)

        session = Session(TokenStore(tmp_path / "token.json"))

        assert session.token == token
        assert session.is_admin
        assert session.auth_headers() == {"Authorization": f"Bearer {token}"}

    def test_opaque_token(self):
        """Test a non-JWT token is kept but carries no claims"""
        session = Session(MemoryTokenStore("opaque"))
        assert session.is_authenticated
        assert session.claims == {}
        assert not session.is_admin
        assert not is_expired("opaque")
        assert token_claims("opaque") == {}

    def test_set_and_clear(self):
        """Test setting and clearing persist through the store"""
        store = MemoryTokenStore()
        session = Session(store)
        assert session.auth_headers() == {}

        session.set_token("abc")
        assert store.token == "abc"
        session.clear()
        assert store.token is None
        assert session.auth_headers() == {}

    def test_is_expired_at(self):
        """Test expiry against an explicit clock"""
        exp = datetime(2030, 1, 1, tzinfo=timezone.utc)
        token = make_token(exp=exp)
        assert not is_expired(token, now=exp - timedelta(seconds=1))
        assert is_expired(token, now=exp)
