import sys
from datetime import datetime
from pathlib import Path

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from assetdesk import create_app
from assetdesk.core.config import AppSettings
from assetdesk.db.blobstore import Collection

ASSET = {
    "name": "ThinkPad T14",
    "type": "laptop",
    "serialNumber": "LEN-T14-0001",
    "model": "T14 Gen 3",
    "status": "available",
    "purchaseDate": "2024-05-01",
    "warrantyExpiry": "2027-05-01",
    "location": "HQ",
}


def parse_ts(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


STOCK = {
    "name": "Toner",
    "category": "Printer Supplies",
    "quantity": 1,
    "minQuantity": 3,
    "unit": "pieces",
    "location": "Storage Room B",
    "supplier": "HP Store",
}


@pytest.fixture()
def app(tmp_path):
    settings = AppSettings(STORE_BACKEND="memory", BCRYPT_ROUNDS=4, DATA_DIR=tmp_path, EMAIL_API_URL="")
    return create_app(settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def authed(client):
    response = client.post(
        "/api/v1/auth/signup",
        json={"name": "Ada", "email": "ada@example.com", "password": "s3cret!", "role": "admin"},
    )
    assert response.status_code == 201
    return client


def test_inventory_routes_require_login(client):
    for path in ("/api/v1/assets", "/api/v1/stock", "/api/v1/dashboard"):
        response = client.get(path)
        assert response.status_code == 401
        assert response.json() == {"code": "http_error", "message": "Login required"}


def test_html_401_redirects_to_login(app, client):
    def guarded():
        raise HTTPException(status_code=401, detail="Login required")

    app.add_api_route("/inventory", guarded)

    response = client.get("/inventory", headers={"Accept": "text/html"}, follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/login?next=/inventory"


def test_responses_carry_request_id_and_security_headers(client):
    response = client.get("/api/v1/auth/session", headers={"X-Request-ID": "req-1"})

    assert response.headers["X-Request-ID"] == "req-1"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    body = response.json()
    assert body["isAuthenticated"] is False
    assert body["currentUser"] is None


def test_signup_session_hides_password(authed):
    body = authed.get("/api/v1/auth/session").json()

    assert body["isAuthenticated"] is True
    assert body["currentUser"]["email"] == "ada@example.com"
    assert body["currentUser"]["role"] == "admin"
    assert "password" not in body["currentUser"]


def test_login_logout_cycle(authed):
    assert authed.post("/api/v1/auth/logout").json() == {"status": "logged_out"}
    assert authed.get("/api/v1/assets").status_code == 401

    bad = authed.post("/api/v1/auth/login", json={"email": "ada@example.com", "password": "nope"})
    assert bad.status_code == 401
    assert bad.json()["code"] == "InvalidCredentials"

    good = authed.post("/api/v1/auth/login", json={"email": "ada@example.com", "password": "s3cret!"})
    assert good.status_code == 200
    assert good.json()["isAuthenticated"] is True


def test_social_login(client):
    response = client.post(
        "/api/v1/auth/social/github",
        json={"id": "gh-1", "name": "Octo", "email": "octo@example.com"},
    )

    assert response.status_code == 200
    assert response.json()["currentUser"]["provider"] == "github"
    assert client.post("/api/v1/auth/social/myspace", json={"id": "1", "name": "x", "email": "x@y.z"}).status_code == 422


def test_password_reset_flow(app, authed):
    unknown = authed.post("/api/v1/auth/reset-password", json={"email": "nobody@example.com"})
    assert unknown.status_code == 404
    assert unknown.json()["code"] == "UnknownAccount"

    sent = authed.post("/api/v1/auth/reset-password", json={"email": "ada@example.com"})
    assert sent.status_code == 202
    store = app.state.store
    token = store.blobs.load(Collection.RESET_TOKENS)[0]["token"]
    assert token in store.mailer.sent[-1].html_body

    done = authed.post(
        "/api/v1/auth/reset-password/complete",
        json={"token": token, "email": "ada@example.com", "newPassword": "changed"},
    )
    assert done.json() == {"status": "reset"}

    reused = authed.post(
        "/api/v1/auth/reset-password/complete",
        json={"token": token, "email": "ada@example.com", "newPassword": "again"},
    )
    assert reused.status_code == 400
    assert reused.json()["code"] == "InvalidOrExpiredToken"


def test_signup_bootstraps_assets_and_filters(authed):
    assets = authed.get("/api/v1/assets").json()
    assert [a["serialNumber"] for a in assets] == ["DL123456", "HP789012"]

    laptops = authed.get("/api/v1/assets", params={"type": "laptop"}).json()
    assert [a["name"] for a in laptops] == ["Dell XPS 13"]

    assigned = authed.get("/api/v1/assets", params={"status": "assigned", "q": "it dep"}).json()
    assert [a["assignedTo"] for a in assigned] == ["IT Department"]


def test_asset_crud(authed):
    created = authed.post("/api/v1/assets", json=ASSET)
    assert created.status_code == 201
    asset = created.json()
    assert asset["serialNumber"] == "LEN-T14-0001"
    assert asset["createdAt"] == asset["updatedAt"]

    patched = authed.patch(f"/api/v1/assets/{asset['id']}", json={"status": "assigned", "assignedTo": "Jane"})
    assert patched.status_code == 200
    assert patched.json()["assignedTo"] == "Jane"
    assert parse_ts(patched.json()["updatedAt"]) > parse_ts(asset["updatedAt"])

    assert authed.get(f"/api/v1/assets/{asset['id']}").json()["status"] == "assigned"
    assert authed.delete(f"/api/v1/assets/{asset['id']}").json() == {"status": "deleted"}

    missing = authed.get(f"/api/v1/assets/{asset['id']}")
    assert missing.status_code == 404
    assert missing.json()["code"] == "NotFound"


def test_asset_validation_errors(authed):
    unknown_field = authed.post("/api/v1/assets", json={**ASSET, "colour": "red"})
    assert unknown_field.status_code == 422
    assert unknown_field.json()["code"] == "validation_error"

    bad_type = authed.post("/api/v1/assets", json={**ASSET, "type": "phone"})
    assert bad_type.status_code == 422

    assert authed.patch("/api/v1/assets/nope", json={"status": "retired"}).status_code == 404


def test_stock_routes(authed):
    created = authed.post("/api/v1/stock", json=STOCK)
    assert created.status_code == 201
    item = created.json()
    assert item["lowStock"] is True
    assert item["lastRestocked"] == item["createdAt"]

    low = authed.get("/api/v1/stock/low").json()
    assert [i["name"] for i in low] == ["Toner"]
    assert authed.get("/api/v1/stock/categories").json() == ["Office Supplies", "Printer Supplies"]
    assert [i["name"] for i in authed.get("/api/v1/stock", params={"level": "adequate"}).json()] == [
        "A4 Paper",
        "Ink Cartridges",
    ]
    assert [i["name"] for i in authed.get("/api/v1/stock", params={"q": "hp", "category": "Printer Supplies"}).json()] == [
        "Ink Cartridges",
        "Toner",
    ]

    restocked = authed.post(f"/api/v1/stock/{item['id']}/restock").json()
    assert restocked["quantity"] == 6
    assert restocked["lowStock"] is False

    counted = authed.put(f"/api/v1/stock/{item['id']}/quantity", json={"quantity": 2})
    assert counted.json()["quantity"] == 2
    assert authed.put(f"/api/v1/stock/{item['id']}/quantity", json={"quantity": -1}).status_code == 422

    renamed = authed.patch(f"/api/v1/stock/{item['id']}", json={"name": "Black toner"})
    assert renamed.json()["name"] == "Black toner"

    assert authed.delete(f"/api/v1/stock/{item['id']}").json() == {"status": "deleted"}
    assert authed.get(f"/api/v1/stock/{item['id']}").status_code == 404


def test_dashboard_trends_against_first_view(authed):
    first = authed.get("/api/v1/dashboard").json()
    assert first["stats"]["totalAssets"] == 2
    assert first["stats"]["assignedAssets"] == 1
    assert first["trends"]["totalAssets"] == {"value": 0, "isPositive": True}
    assert {p["name"] for p in first["assetsByType"]} == {"Laptops", "Printers"}

    authed.post("/api/v1/assets", json=ASSET)
    second = authed.get("/api/v1/dashboard").json()
    assert second["stats"]["totalAssets"] == 3
    assert second["trends"]["totalAssets"] == {"value": 50, "isPositive": True}
    assert len(second["recentAssets"]) == 3

    snapshot = authed.post("/api/v1/dashboard/snapshot").json()
    assert snapshot["totalAssets"] == 3
    third = authed.get("/api/v1/dashboard").json()
    assert third["trends"]["totalAssets"]["value"] == 0


def test_password_whitespace_survives_http(app, client):
    signed_up = client.post(
        "/api/v1/auth/signup",
        json={"name": "Ada", "email": " ada@example.com ", "password": "hunter2 "},
    )
    assert signed_up.status_code == 201
    assert signed_up.json()["currentUser"]["email"] == "ada@example.com"
    client.post("/api/v1/auth/logout")

    assert client.post("/api/v1/auth/login", json={"email": "ada@example.com", "password": "hunter2"}).status_code == 401
    assert client.post("/api/v1/auth/login", json={"email": "ada@example.com", "password": "hunter2 "}).status_code == 200
    app.state.store.logout()
    app.state.store.login("ada@example.com", "hunter2 ")


def test_signup_rejects_federated_provider(client):
    response = client.post(
        "/api/v1/auth/signup",
        json={"name": "Ada", "email": "ada@example.com", "password": "x", "provider": "google"},
    )

    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_session_is_shared_by_every_client(app, authed):
    with TestClient(app) as other:
        assert other.get("/api/v1/assets").status_code == 200
        other.post("/api/v1/auth/logout")

    assert authed.get("/api/v1/assets").status_code == 401


def test_cors_only_when_origins_configured(tmp_path, client):
    settings = AppSettings(
        STORE_BACKEND="memory",
        BCRYPT_ROUNDS=4,
        DATA_DIR=tmp_path,
        ALLOWED_ORIGINS="https://desk.example.com",
    )
    with TestClient(create_app(settings)) as cors_client:
        allowed = cors_client.get("/api/v1/auth/session", headers={"Origin": "https://desk.example.com"})
    assert allowed.headers["access-control-allow-origin"] == "https://desk.example.com"

    plain = client.get("/api/v1/auth/session", headers={"Origin": "https://desk.example.com"})
    assert "access-control-allow-origin" not in plain.headers
