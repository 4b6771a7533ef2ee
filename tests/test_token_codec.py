"""Tests for the bearer-token codec and password hashing."""

import uuid
from datetime import timedelta

import pytest
from jose import jwt

from workhub.core.exceptions import TokenInvalidError
from workhub.core.security import (
    Principal,
    decode_access_token,
    decode_refresh_token,
    decode_token,
    hash_password,
    is_refresh_token,
    issue_access_token,
    issue_refresh_token,
    settings,
    verify_password,
)


def _principal(**overrides) -> Principal:
    data = dict(
        account_id=uuid.uuid4(),
        phone_num="998901234567",
        first_name="Ada",
        last_name="Lovelace",
        employee_id=uuid.uuid4(),
        authorities=("ROLE_USER", "TASK_READ"),
    )
    data.update(overrides)
    return Principal(**data)


def test_access_token_round_trip():
    principal = _principal()
    tenant_id = uuid.uuid4()

    claims = decode_token(issue_access_token(principal, tenant_id))

    assert claims.subject == principal.account_id
    assert claims.phone_num == principal.phone_num
    assert claims.first_name == "Ada"
    assert claims.last_name == "Lovelace"
    assert claims.employee_id == principal.employee_id
    assert claims.roles == ("ROLE_USER", "TASK_READ")
    assert claims.tenant_id == tenant_id
    assert claims.issuer == settings.jwt_issuer
    assert claims.expires_at - claims.issued_at == timedelta(
        minutes=settings.access_token_expire_minutes
    )
    assert not claims.is_refresh


def test_access_token_omits_absent_optional_claims():
    token = issue_access_token(_principal(employee_id=None))
    payload = jwt.get_unverified_claims(token)

    assert "tenantId" not in payload
    assert "employeeId" not in payload
    assert payload["roles"] == ["ROLE_USER", "TASK_READ"]


def test_refresh_token_carries_no_authority_claims():
    account_id = uuid.uuid4()
    token = issue_refresh_token(account_id)

    claims = decode_token(token)
    assert claims.is_refresh
    assert claims.subject == account_id
    assert claims.roles is None
    assert claims.tenant_id is None
    assert is_refresh_token(token)
    assert not is_refresh_token(issue_access_token(_principal()))


def test_refresh_token_rejected_as_access_token():
    with pytest.raises(TokenInvalidError):
        decode_access_token(issue_refresh_token(uuid.uuid4()))


def test_access_token_rejected_as_refresh_token():
    with pytest.raises(TokenInvalidError):
        decode_refresh_token(issue_access_token(_principal()))


def test_expired_token_is_invalid():
    token = issue_access_token(_principal(), expires_delta=timedelta(seconds=-5))
    with pytest.raises(TokenInvalidError):
        decode_token(token)


def test_expired_refresh_token_is_invalid():
    token = issue_refresh_token(uuid.uuid4(), expires_delta=timedelta(seconds=-5))
    with pytest.raises(TokenInvalidError):
        decode_refresh_token(token)


def test_foreign_signature_is_invalid():
    payload = jwt.get_unverified_claims(issue_access_token(_principal()))
    forged = jwt.encode(payload, "some-other-secret", algorithm="HS256")
    with pytest.raises(TokenInvalidError):
        decode_token(forged)


def test_wrong_issuer_is_invalid():
    payload = jwt.get_unverified_claims(issue_access_token(_principal()))
    payload["iss"] = "someone-else"
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    with pytest.raises(TokenInvalidError):
        decode_token(token)


def test_malformed_subject_is_invalid():
    payload = jwt.get_unverified_claims(issue_access_token(_principal()))
    payload["sub"] = "not-a-uuid"
    token = jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    with pytest.raises(TokenInvalidError):
        decode_token(token)


@pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", "Bearer x.y.z"])
def test_garbage_is_invalid(garbage):
    with pytest.raises(TokenInvalidError):
        decode_token(garbage)
    assert not is_refresh_token(garbage)


def test_every_failure_has_the_same_shape():
    expired = issue_access_token(_principal(), expires_delta=timedelta(seconds=-5))
    errors = []
    for token in (expired, "garbage", issue_refresh_token(uuid.uuid4())):
        with pytest.raises(TokenInvalidError) as info:
            decode_access_token(token)
        errors.append((info.value.code, info.value.status_code, info.value.message))
    assert len(set(errors)) == 1


def test_password_hash_round_trip():
    hashed = hash_password("Secret#123")
    assert hashed != "Secret#123"
    assert verify_password("Secret#123", hashed)
    assert not verify_password("Secret#124", hashed)
