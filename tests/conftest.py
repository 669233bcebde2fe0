"""Pytest configuration and fixtures"""
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from tokenledger.config import StoreConfig, settings
from tokenledger.hooks import TokenLifecycleHooks
from tokenledger.main import create_app
from tokenledger.store import TokenStore


@pytest.fixture(scope="function")
def store_config() -> Generator[StoreConfig, None, None]:
    """In-memory SQLite shared across sessions and threads"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield StoreConfig(engine=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def store(store_config: StoreConfig) -> Generator[TokenStore, None, None]:
    """Token store with a fresh table for each test"""
    token_store = TokenStore(store_config)
    token_store.create_schema()
    try:
        yield token_store
    finally:
        token_store.drop_schema()


@pytest.fixture
def hooks(store: TokenStore) -> TokenLifecycleHooks:
    return TokenLifecycleHooks(store)


@pytest.fixture(scope="function")
def client(store_config: StoreConfig, store: TokenStore) -> Generator[TestClient, None, None]:
    """Test client bound to the same in-memory database as ``store``"""
    app = create_app(store_config)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers() -> dict:
    """Admin authentication headers"""
    return {"X-Admin-Key": settings.ADMIN_API_KEY}


@pytest.fixture
def sample_claims() -> dict:
    """Decoded claims as produced by a token encoder"""
    return {
        "jti": "abc123",
        "aud": "web",
        "typ": "access",
        "iss": "tokenledger",
        "sub": "user:42",
        "exp": 9999999999,
        "iat": 1700000000,
        "scope": ["read", "write"],
    }
