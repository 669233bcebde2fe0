"""tokenledger: database-backed token records for revocable JWTs.

Every issued token is recorded; verification requires the record to still
exist, revocation deletes it, and a periodic purge clears expired rows.
"""
__version__ = "0.1.0"
