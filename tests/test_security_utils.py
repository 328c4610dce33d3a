import uuid

from jose import jwt

from humanlenk.api.utils import create_access_token, parse_uuid, verify_token
from humanlenk.crypt.encrypt_decrypt import EncryptionDec


def test_token_round_trip_carries_subject_and_claims(settings):
    token = create_access_token({"sub": "user-1"}, settings)

    assert verify_token(token, settings) == "user-1"
    claims = jwt.get_unverified_claims(token)
    assert claims["iss"] == "humanlenk-api"
    assert claims["aud"] == "humanlenk-client"
    assert claims["exp"] > 0


def test_token_signed_with_another_secret_is_rejected(settings):
    other = settings.model_copy(update={"SECRET_KEY": "another-secret"})
    token = create_access_token({"sub": "user-1"}, other)

    assert verify_token(token, settings) is None


def test_expired_token_is_rejected(settings):
    expired_settings = settings.model_copy(update={"ACCESS_TOKEN_EXPIRE_MINUTES": -5})
    token = create_access_token({"sub": "user-1"}, expired_settings)

    assert verify_token(token, settings) is None


def test_token_for_another_audience_is_rejected(settings):
    foreign = settings.model_copy(update={"TOKEN_AUDIENCE": "someone-else"})
    token = create_access_token({"sub": "user-1"}, foreign)

    assert verify_token(token, settings) is None


def test_password_hashing():
    enc = EncryptionDec(rounds=4)
    hashed = enc.hash_password("password123")

    assert hashed != "password123"
    assert enc.check_passwords("password123", hashed)
    assert not enc.check_passwords("password124", hashed)
    assert not enc.check_passwords("password123", "not-a-bcrypt-hash")


def test_parse_uuid():
    value = uuid.uuid4()

    assert parse_uuid(str(value)) == value
    assert parse_uuid(value) == value
    assert parse_uuid("123") is None
    assert parse_uuid(None) is None
