"""HTTP tests for the service endpoints and the shared error envelope."""


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_security_headers(client):
    response = client.get("/")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert set(response.json()) >= {"error", "message", "code"}


def test_server_errors_are_enveloped(client, db):
    db.fail("listings", "select")
    response = client.get("/api/listings")
    assert response.status_code == 500
    body = response.json()
    assert body["code"] == "server_error"
    assert body["message"] == "Server error fetching listings"
