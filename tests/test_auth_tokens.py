from jose import jwt

from lexadvisor.api.utils import create_access_token, verify_token
from lexadvisor.crypt.encrypt_decrypt import EncryptionDec
from lexadvisor.database.config.config import settings


def test_token_round_trip_returns_subject():
    token = create_access_token({"sub": "3f0c6c2e-0000-4000-8000-000000000001", "email": "a@lex.test"})
    assert verify_token(token) == "3f0c6c2e-0000-4000-8000-000000000001"


def test_expired_or_foreign_tokens_are_rejected():
    expired = jwt.encode({"sub": "x", "exp": 1}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    assert verify_token(expired) is None
    forged = jwt.encode({"sub": "x"}, "another-key", algorithm=settings.ALGORITHM)
    assert verify_token(forged) is None
    assert verify_token("not.a.jwt") is None


def test_password_hashing():
    enc = EncryptionDec()
    hashed = enc.hash_password("secret123")
    assert hashed != "secret123"
    assert enc.check_passwords("secret123", hashed)
    assert not enc.check_passwords("secret124", hashed)
    assert not enc.check_passwords("secret123", "not-a-bcrypt-hash")
    assert not enc.is_valid_password("12345")
    assert enc.is_valid_password("123456")
