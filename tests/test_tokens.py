import time

import jwt

from shopapi import auth, config


def test_issued_token_verifies_to_same_user():
    token = auth.create_access_token(42)
    assert auth.verify_access_token(token) == 42


def test_token_claims_and_default_expiry():
    token = auth.create_access_token(7)
    payload = jwt.decode(token, config.get_settings().jwt_secret, algorithms=[auth.ALGORITHM])
    assert payload["id"] == 7
    assert payload["exp"] - payload["iat"] == config.get_settings().jwt_expires_in


def test_expiry_is_configurable(settings):
    settings(jwt_expires_in=60)
    payload = jwt.decode(auth.create_access_token(7), config.get_settings().jwt_secret, algorithms=[auth.ALGORITHM])
    assert payload["exp"] - payload["iat"] == 60


def test_expired_token_is_invalid():
    token = auth.create_access_token(1, expires_in=-10)
    assert auth.verify_access_token(token) is None


def test_altered_signature_is_invalid():
    token = auth.create_access_token(1)
    header, payload, signature = token.split(".")
    swapped = ("A" if signature[0] != "A" else "B") + signature[1:]
    assert auth.verify_access_token(".".join([header, payload, swapped])) is None


def test_altered_payload_is_invalid():
    token = auth.create_access_token(1)
    header, _, signature = token.split(".")
    forged = jwt.encode({"id": 2, "iat": int(time.time()), "exp": int(time.time()) + 60}, "other-secret")
    forged_payload = forged.split(".")[1]
    assert auth.verify_access_token(".".join([header, forged_payload, signature])) is None


def test_token_signed_with_other_secret_is_invalid(settings):
    token = auth.create_access_token(5)
    settings(jwt_secret="rotated-secret")
    assert auth.verify_access_token(token) is None


def test_malformed_tokens_do_not_raise():
    for token in (None, "", "not-a-token", "a.b.c", "Bearer xyz"):
        assert auth.verify_access_token(token) is None


def test_token_without_integer_id_is_invalid():
    secret = config.get_settings().jwt_secret
    now = int(time.time())
    no_id = jwt.encode({"iat": now, "exp": now + 60}, secret, algorithm=auth.ALGORITHM)
    text_id = jwt.encode({"id": "12", "iat": now, "exp": now + 60}, secret, algorithm=auth.ALGORITHM)
    assert auth.verify_access_token(no_id) is None
    assert auth.verify_access_token(text_id) is None


def test_state_token_is_bound_to_provider():
    state = auth.create_state_token("google")
    assert auth.verify_state_token(state, "google")
    assert not auth.verify_state_token(state, "github")
    assert not auth.verify_state_token(None, "google")
    # session tokens and state tokens are not interchangeable
    assert not auth.verify_state_token(auth.create_access_token(3), "google")
    assert auth.verify_access_token(state) is None


def test_password_hashing():
    hashed = auth.hash_password("secret1")
    assert hashed != "secret1"
    assert auth.verify_password("secret1", hashed)
    assert not auth.verify_password("secret2", hashed)
