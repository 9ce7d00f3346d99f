"""Tests for local auth and password hashing."""

from conftest import make_user
from localhands.services import AuthError, Pbkdf2PasswordHasher


class TestPasswordHasher:
    """Test the PBKDF2 hasher."""

    def test_hash_and_verify(self):
        hasher = Pbkdf2PasswordHasher(iterations=1_000)
        digest = hasher.hash("secret")

        assert digest != "secret"
        assert digest.startswith("pbkdf2_sha256$1000$")
        assert hasher.verify("secret", digest)
        assert not hasher.verify("wrong", digest)

    def test_salts_differ(self):
        hasher = Pbkdf2PasswordHasher(iterations=1_000)

        assert hasher.hash("secret") != hasher.hash("secret")

    def test_malformed_digest_never_matches(self):
        hasher = Pbkdf2PasswordHasher(iterations=1_000)

        assert not hasher.verify("secret", "")
        assert not hasher.verify("secret", "plaintext")
        assert not hasher.verify("secret", "pbkdf2_sha256$x$zz$zz")


class TestAuthService:
    """Test register/login/verification flows."""

    async def test_register_hashes_password_and_lowercases_email(self, auth, store):
        result = await auth.register(make_user(email="Ana@Example.com", password="secret"))

        assert result.ok
        stored = await store.users.get(result.value.id)
        assert stored.email == "ana@example.com"
        assert stored.password != "secret"

    async def test_duplicate_email_is_rejected(self, auth):
        await auth.register(make_user(email="ana@example.com"))

        result = await auth.register(make_user(email="ANA@example.com"))

        assert not result.ok
        assert isinstance(result.error, AuthError)

    async def test_login_requires_verified_email(self, auth):
        await auth.register(make_user(email="ana@example.com", password="secret"))

        unverified = await auth.login("ana@example.com", "secret")
        assert not unverified.ok
        assert "not verified" in unverified.message

        await auth.verify_email("ana@example.com")
        session = await auth.login("ANA@example.com", "secret")

        assert session.ok
        assert session.value.is_authenticated
        assert session.value.email == "ana@example.com"

    async def test_login_with_wrong_password(self, auth):
        await auth.register(make_user(email="ana@example.com", password="secret"))
        await auth.verify_email("ana@example.com")

        assert not (await auth.login("ana@example.com", "nope")).ok
        assert not (await auth.login("nobody@example.com", "secret")).ok

    async def test_verification_code_flow(self, auth):
        await auth.register(make_user(email="ana@example.com"))

        generated = await auth.generate_verification_code("ana@example.com")
        assert generated.ok
        assert 1000 <= int(generated.value) <= 9999

        assert (await auth.verify_reset_code("ana@example.com", generated.value)).ok
        assert not (await auth.verify_reset_code("ana@example.com", "0000")).ok

    async def test_code_for_unknown_email_fails(self, auth):
        assert not (await auth.generate_verification_code("nobody@example.com")).ok
        assert not (await auth.verify_email("nobody@example.com")).ok

    async def test_update_password(self, auth):
        await auth.register(make_user(email="ana@example.com", password="old"))
        await auth.verify_email("ana@example.com")

        assert (await auth.update_password("ana@example.com", "new")).ok
        assert (await auth.login("ana@example.com", "new")).ok
        assert not (await auth.login("ana@example.com", "old")).ok
        assert not (await auth.update_password("nobody@example.com", "x")).ok

    async def test_email_exists(self, auth):
        await auth.register(make_user(email="ana@example.com"))

        assert await auth.email_exists(" ANA@example.com ")
        assert not await auth.email_exists("other@example.com")
