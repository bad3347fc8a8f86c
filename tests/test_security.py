from notes_api.security import create_access_token, decode_token, hash_password, verify_password


def test_hash_password_is_salted():
    first = hash_password("p@ss")
    second = hash_password("p@ss")
    assert first != second
    assert first != "p@ss"
    assert verify_password("p@ss", first)
    assert verify_password("p@ss", second)
    assert not verify_password("other", first)


def test_verify_password_rejects_malformed_hash():
    assert not verify_password("p@ss", "not-a-hash")


def test_access_token_claims():
    claims = decode_token(create_access_token("alice", ["Employee"]))
    assert claims["sub"] == "alice"
    assert claims["roles"] == ["Employee"]
    assert claims["type"] == "access"
