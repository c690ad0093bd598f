from collabdocs.core.security import (
    create_auth_token,
    hash_password,
    parse_auth_token,
    verify_password,
)


class TestPasswords:

    def test_hash_is_salted(self):
        first = hash_password("hunter22", iterations=1000)
        second = hash_password("hunter22", iterations=1000)

        assert first != second
        assert first.startswith("pbkdf2_sha256$1000$")

    def test_verify_correct_and_wrong_password(self):
        stored = hash_password("hunter22", iterations=1000)

        assert verify_password("hunter22", stored)
        assert not verify_password("hunter23", stored)

    def test_verify_rejects_malformed_hash(self):
        assert not verify_password("hunter22", "not-a-hash")
        assert not verify_password("hunter22", "md5$1$salt$abc")


class TestAuthTokens:

    def test_round_trip(self):
        token = create_auth_token(42)

        assert token.startswith("user-42.")
        assert parse_auth_token(token) == 42

    def test_tampered_user_id_is_rejected(self):
        token = create_auth_token(42)
        forged = token.replace("user-42.", "user-43.", 1)

        assert parse_auth_token(forged) is None

    def test_expired_token_is_rejected(self):
        assert parse_auth_token(create_auth_token(7, ttl_seconds=-10)) is None

    def test_malformed_tokens(self):
        assert parse_auth_token("") is None
        assert parse_auth_token("user-1.exp.sign") is None
        assert parse_auth_token("garbage") is None
