"""
Sign-in gate — allow-list, magic links, access codes, sessions.
"""

from datetime import datetime, timedelta

from leocalc import models
from leocalc.auth import AccessPolicy, hash_access_code, hash_token

from conftest import ACCESS_CODE, AUTHORIZED_EMAIL


# ============================================================
# Access policy
# ============================================================

def test_policy_matches_emails_case_insensitively():
    policy = AccessPolicy([" Ops@Leopack.in "], [])
    assert policy.is_authorized("ops@leopack.in")
    assert policy.is_authorized("OPS@LEOPACK.IN")
    assert not policy.is_authorized("someone@else.com")
    assert not policy.is_authorized("")


def test_empty_policy_admits_nobody():
    policy = AccessPolicy()
    assert not policy.is_authorized("ops@leopack.in")
    assert not policy.matches_access_code("anything")


def test_access_code_can_be_revoked():
    policy = AccessPolicy([], [hash_access_code("alpha"), hash_access_code("beta")])
    assert policy.matches_access_code("alpha")
    assert policy.revoke_access_code("alpha") is True
    assert not policy.matches_access_code("alpha")
    assert policy.matches_access_code("beta")
    assert policy.revoke_access_code("alpha") is False


def test_malformed_hash_is_ignored():
    policy = AccessPolicy([], ["not-a-bcrypt-hash", hash_access_code("alpha")])
    assert policy.matches_access_code("alpha")
    assert not policy.matches_access_code("beta")


# ============================================================
# Magic link
# ============================================================

def test_unauthorized_email_is_denied(client, outbox):
    response = client.post("/api/auth/magic-link", json={"email": "intruder@example.com"})
    assert response.status_code == 403
    assert "not authorized" in response.json()["detail"]
    assert outbox.sent == []


def test_authorized_email_gets_a_link(client, outbox, db):
    response = client.post("/api/auth/magic-link", json={"email": "  OPS@leopack.in "})
    assert response.status_code == 200
    assert response.json()["message"] == "Login link sent! Please check your email inbox."
    assert outbox.sent[0][0] == AUTHORIZED_EMAIL
    assert "/login?token=" in outbox.sent[0][1]

    stored = db.query(models.AuthToken).filter(models.AuthToken.email == AUTHORIZED_EMAIL).all()
    assert len(stored) == 1
    assert stored[0].token_type == "magic_link"
    assert stored[0].token_hash == hash_token(outbox.last_token())


def test_second_request_within_cooldown_is_rate_limited(client, outbox):
    assert client.post("/api/auth/magic-link", json={"email": AUTHORIZED_EMAIL}).status_code == 200
    response = client.post("/api/auth/magic-link", json={"email": AUTHORIZED_EMAIL})
    assert response.status_code == 429
    assert response.json()["detail"] == (
        "Too many attempts. Please wait 60 seconds before sending another link."
    )
    assert len(outbox.sent) == 1


def test_request_after_cooldown_is_allowed(client, outbox, db):
    client.post("/api/auth/magic-link", json={"email": AUTHORIZED_EMAIL})
    token = db.query(models.AuthToken).first()
    token.created_at = datetime.utcnow() - timedelta(seconds=61)
    db.commit()
    assert client.post("/api/auth/magic-link", json={"email": AUTHORIZED_EMAIL}).status_code == 200


def test_verify_issues_session(client, outbox):
    client.post("/api/auth/magic-link", json={"email": AUTHORIZED_EMAIL})
    response = client.post("/api/auth/verify", json={"token": outbox.last_token()})
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == AUTHORIZED_EMAIL
    assert data["user"]["is_master"] is False

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == AUTHORIZED_EMAIL


def test_magic_link_works_once(client, outbox):
    client.post("/api/auth/magic-link", json={"email": AUTHORIZED_EMAIL})
    token = outbox.last_token()
    assert client.post("/api/auth/verify", json={"token": token}).status_code == 200
    response = client.post("/api/auth/verify", json={"token": token})
    assert response.status_code == 401


def test_expired_link_rejected(client, outbox, db):
    client.post("/api/auth/magic-link", json={"email": AUTHORIZED_EMAIL})
    stored = db.query(models.AuthToken).first()
    stored.expires_at = datetime.utcnow() - timedelta(minutes=1)
    db.commit()
    response = client.post("/api/auth/verify", json={"token": outbox.last_token()})
    assert response.status_code == 401
    assert "expired" in response.json()["detail"]


def test_removed_email_cannot_use_pending_link(client, outbox, policy):
    client.post("/api/auth/magic-link", json={"email": AUTHORIZED_EMAIL})
    policy.authorized_emails.discard(AUTHORIZED_EMAIL)
    response = client.post("/api/auth/verify", json={"token": outbox.last_token()})
    assert response.status_code == 403


def test_refresh_token_is_not_a_link(client, tokens):
    response = client.post("/api/auth/verify", json={"token": tokens["refresh_token"]})
    assert response.status_code == 401


def test_garbage_token_rejected(client):
    assert client.post("/api/auth/verify", json={"token": "not.a.jwt"}).status_code == 401


# ============================================================
# Access codes
# ============================================================

def test_access_code_signs_in_without_email(client, outbox):
    response = client.post("/api/auth/magic-link", json={"email": ACCESS_CODE})
    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert data["user"]["is_master"] is True
    assert outbox.sent == []


def test_revoked_access_code_is_denied(client, policy):
    policy.revoke_access_code(ACCESS_CODE)
    response = client.post("/api/auth/magic-link", json={"email": ACCESS_CODE})
    assert response.status_code == 403


# ============================================================
# Sessions
# ============================================================

def test_protected_routes_require_auth(client):
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/archives/").status_code == 401
    assert client.get("/api/workspace/").status_code == 401
    assert client.post("/api/calculators/freight", json={}).status_code == 401


def test_refresh_returns_new_access_token(client, tokens):
    response = client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 200
    assert response.json()["user_id"] == tokens["user_id"]


def test_access_token_cannot_refresh(client, tokens):
    response = client.post("/api/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert response.status_code == 401


def test_logout_revokes_refresh_tokens(client, tokens, auth_headers):
    response = client.post("/api/auth/logout", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"ok": True, "revoked": 1}
    response = client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 401


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "app": "leocalc"}
