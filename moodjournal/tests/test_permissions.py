import pytest
from flask import Blueprint
from flask_jwt_extended import create_access_token

pytestmark = pytest.mark.integration

from moodjournal.core.utils.decorators import require_roles


def _register_protected(app, name, roles):
    bp = Blueprint(name, __name__)

    @bp.get(f"/{name}")
    @require_roles(roles)
    def protected():
        return {"ok": True}

    app.register_blueprint(bp)
    return f"/{name}"


def _token(user_id, roles):
    return create_access_token(identity=str(user_id), additional_claims={"roles": roles})


def test_require_roles_blocks_without_claims(app, client, user_with_token):
    url = _register_protected(app, "perm_test", {"admin"})
    token = _token(user_with_token["user_id"], [])
    resp = client.get(url, headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403


def test_require_roles_allows_with_claims(app, client, user_with_token):
    url = _register_protected(app, "perm_test2", {"admin"})
    token = _token(user_with_token["user_id"], ["admin"])
    resp = client.get(url, headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.get_json()["ok"] is True


def test_admin_claim_satisfies_any_role(app, client, admin_with_token):
    url = _register_protected(app, "perm_test3", {"user"})
    resp = client.get(url, headers=admin_with_token["headers"])
    assert resp.status_code == 200


def test_require_roles_rejects_missing_or_orphaned_token(app, client):
    url = _register_protected(app, "perm_test4", {"user"})
    assert client.get(url).status_code == 401
    token = _token(9999, ["admin"])
    assert client.get(url, headers={"Authorization": f"Bearer {token}"}).status_code == 401
