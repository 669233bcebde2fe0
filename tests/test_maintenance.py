"""Tests for the purge maintenance command"""
from tokenledger.config import resolve_store_config, settings
from tokenledger.maintenance import main, purge_expired_tokens
from tokenledger.store import TokenStore


def test_purge_expired_tokens(store: TokenStore):
    store.create({"jti": "a", "aud": "web", "exp": 10}, "raw")
    store.create({"jti": "b", "aud": "web", "exp": 30}, "raw")

    assert purge_expired_tokens(store, now=20) == 1
    assert purge_expired_tokens(store, now=20) == 0


def test_main_without_database_url(monkeypatch):
    """Test the command exits with a configuration error"""
    monkeypatch.setattr(settings, "DATABASE_URL", None)
    assert main([]) == 2


def test_main_purges(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite:///{tmp_path / 'tokens.db'}")

    config = resolve_store_config(settings)
    store = TokenStore(config)
    store.create_schema()
    store.create({"jti": "a", "aud": "web", "exp": 10}, "raw")
    store.create({"jti": "b", "aud": "web", "exp": 30}, "raw")

    assert main(["--now", "20"]) == 0
    assert capsys.readouterr().out.strip().splitlines()[-1] == "1"
    assert store.find_by_claims({"jti": "b", "aud": "web"}) is not None
    config.engine.dispose()
