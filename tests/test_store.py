"""Tests for the token record store"""
import pytest
from sqlalchemy import func, select

from tokenledger.errors import DuplicateIdentity, InvalidClaims, StoreError
from tokenledger.store import TokenStore


def _claims(jti: str, exp: int, aud: str = "web") -> dict:
    return {"jti": jti, "aud": aud, "typ": "access", "sub": "user:1", "exp": exp}


def _row_count(store: TokenStore) -> int:
    with store.config.engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(store.table)).scalar_one()


def test_create_then_find_round_trip(store: TokenStore, sample_claims: dict):
    """Test a created record is found with the same fields"""
    created = store.create(sample_claims, "raw.jwt.text")
    found = store.find_by_claims(sample_claims)

    assert found is not None
    assert found.jti == "abc123"
    assert found.aud == "web"
    assert found.typ == "access"
    assert found.iss == "tokenledger"
    assert found.sub == "user:42"
    assert found.exp == 9999999999
    assert found.jwt == "raw.jwt.text"
    assert found.claims == sample_claims
    assert found.created_at == created.created_at
    assert found.updated_at == found.created_at


def test_create_duplicate_identity_fails(store: TokenStore, sample_claims: dict):
    """Test inserting the same (jti, aud) twice raises without overwriting"""
    store.create(sample_claims, "first")

    with pytest.raises(DuplicateIdentity) as exc_info:
        store.create(sample_claims, "second")

    assert exc_info.value.jti == "abc123"
    assert exc_info.value.code == "duplicate_identity"
    assert store.find_by_claims(sample_claims).jwt == "first"


def test_same_identity_different_audience(store: TokenStore):
    """Test one jti may be recorded once per audience"""
    store.create(_claims("abc123", 10, aud="web"), "web-token")
    store.create(_claims("abc123", 10, aud="mobile"), "mobile-token")

    assert store.find_by_claims({"jti": "abc123", "aud": "web"}).jwt == "web-token"
    assert store.find_by_claims({"jti": "abc123", "aud": "mobile"}).jwt == "mobile-token"


def test_create_without_jti_is_rejected(store: TokenStore):
    """Test missing or empty jti is a caller error"""
    with pytest.raises(InvalidClaims):
        store.create({"aud": "web", "exp": 10}, "raw")
    with pytest.raises(InvalidClaims):
        store.create({"jti": "", "aud": "web"}, "raw")

    assert _row_count(store) == 0


def test_create_without_audience(store: TokenStore):
    """Test claims without aud match only lookups without aud"""
    store.create({"jti": "no-aud", "exp": 10}, "raw")

    assert store.find_by_claims({"jti": "no-aud"}) is not None
    assert store.find_by_claims({"jti": "no-aud", "aud": "web"}) is None


def test_find_non_matching_returns_none(store: TokenStore, sample_claims: dict):
    """Test lookups that match nothing return None instead of raising"""
    store.create(sample_claims, "raw")

    assert store.find_by_claims({"jti": "unknown", "aud": "web"}) is None
    assert store.find_by_claims({"jti": "abc123", "aud": "mobile"}) is None


def test_delete_is_idempotent(store: TokenStore, sample_claims: dict):
    """Test deleting removes the record and a second delete is a no-op"""
    record = store.create(sample_claims, "raw")

    store.delete(record)
    assert store.find_by_claims(sample_claims) is None

    store.delete(record)
    assert _row_count(store) == 0


def test_delete_only_removes_matching_audience(store: TokenStore):
    """Test delete is keyed on both jti and aud"""
    web = store.create(_claims("abc123", 10, aud="web"), "web")
    store.create(_claims("abc123", 10, aud="mobile"), "mobile")

    store.delete(web)

    assert store.find_by_claims({"jti": "abc123", "aud": "web"}) is None
    assert store.find_by_claims({"jti": "abc123", "aud": "mobile"}) is not None


def test_purge_expired_boundary(store: TokenStore):
    """Test purge removes exp < now and keeps exp >= now"""
    store.create(_claims("old-1", 50), "raw")
    store.create(_claims("old-2", 99), "raw")
    store.create(_claims("edge", 100), "raw")
    store.create(_claims("fresh", 500), "raw")

    assert store.purge_expired(now=100) == 2

    assert store.find_by_claims({"jti": "old-1", "aud": "web"}) is None
    assert store.find_by_claims({"jti": "old-2", "aud": "web"}) is None
    assert store.find_by_claims({"jti": "edge", "aud": "web"}) is not None
    assert store.find_by_claims({"jti": "fresh", "aud": "web"}) is not None

    # Second run finds nothing left to remove
    assert store.purge_expired(now=100) == 0
    assert _row_count(store) == 2


def test_purge_keeps_records_without_expiry(store: TokenStore):
    """Test records with no exp claim are never purged"""
    store.create({"jti": "forever", "aud": "web"}, "raw")

    assert store.purge_expired(now=10**12) == 0
    assert store.find_by_claims({"jti": "forever", "aud": "web"}) is not None


def test_purge_defaults_to_current_time(store: TokenStore):
    """Test purge without an explicit time uses the clock"""
    store.create(_claims("past", 1), "raw")
    store.create(_claims("future", 9999999999), "raw")

    assert store.purge_expired() == 1


def test_backend_failure_raises_store_error(store_config):
    """Test operations against a missing table surface StoreError"""
    unprovisioned = TokenStore(store_config)

    with pytest.raises(StoreError) as exc_info:
        unprovisioned.create({"jti": "x", "aud": "web"}, "raw")
    assert not isinstance(exc_info.value, DuplicateIdentity)

    with pytest.raises(StoreError):
        unprovisioned.find_by_claims({"jti": "x", "aud": "web"})
    with pytest.raises(StoreError):
        unprovisioned.purge_expired(now=100)


def test_custom_table_name(store_config):
    """Test the configured table name is used"""
    custom = TokenStore(store_config._replace(table_name="custom_tokens"))
    custom.create_schema()
    try:
        assert custom.table.name == "custom_tokens"
        custom.create({"jti": "x", "aud": "web"}, "raw")
        assert custom.find_by_claims({"jti": "x", "aud": "web"}) is not None
    finally:
        custom.drop_schema()


def test_ping(store: TokenStore):
    assert store.ping() is True
