import uuid
from datetime import timedelta

from minicrm.core.security import (
    create_access_token,
    decode_token,
    get_password_hash,
    resolve_user_id,
    verify_password,
)


def test_password_hash_round_trip():
    hashed = get_password_hash("correct-horse")

    assert hashed != "correct-horse"
    assert verify_password("correct-horse", hashed)
    assert not verify_password("wrong-horse", hashed)


def test_access_token_resolves_to_user_id():
    user_id = uuid.uuid4()

    token = create_access_token({"sub": "sdr@example.com", "user_id": str(user_id)})

    assert decode_token(token)["type"] == "access"
    assert resolve_user_id(token) == user_id


def test_expired_token_does_not_resolve():
    token = create_access_token({"user_id": str(uuid.uuid4())}, expires_delta=timedelta(minutes=-1))

    assert decode_token(token) is None
    assert resolve_user_id(token) is None


def test_garbage_and_incomplete_tokens_do_not_resolve():
    assert resolve_user_id("not-a-token") is None
    assert resolve_user_id(create_access_token({"sub": "no-user-id"})) is None
