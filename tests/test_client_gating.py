"""Plan gating on client creation."""


def test_free_user_client_limit(client, make_user, auth_headers):
    user = make_user()
    headers = auth_headers(user.id)

    for n in range(3):
        resp = client.post("/clients/", json={"name": f"Client {n}"}, headers=headers)
        assert resp.status_code == 200, resp.text

    blocked = client.post("/clients/", json={"name": "One too many"}, headers=headers)
    assert blocked.status_code == 403
    error = blocked.json()["error"]
    assert "3 clients" in error["message"]
    assert error["details"]["action"] == "create_client"
    assert error["details"]["upgrade_required"] == "pro"
    assert error["details"]["limit"] == 3

    listing = client.get("/clients/", headers=headers)
    assert [c["name"] for c in listing.json()] == ["Client 0", "Client 1", "Client 2"]


def test_pro_user_is_not_blocked_at_free_limit(client, make_pro_user, auth_headers):
    user = make_pro_user()
    headers = auth_headers(user.id)
    for n in range(5):
        resp = client.post("/clients/", json={"name": f"Client {n}"}, headers=headers)
        assert resp.status_code == 200, resp.text


def test_client_counts_are_per_user(client, make_user, auth_headers):
    alice = make_user()
    bob = make_user()
    for n in range(3):
        client.post("/clients/", json={"name": f"A{n}"}, headers=auth_headers(alice.id))

    resp = client.post("/clients/", json={"name": "B0"}, headers=auth_headers(bob.id))
    assert resp.status_code == 200


def test_client_payload_validation(client, make_user, auth_headers):
    user = make_user()
    resp = client.post("/clients/", json={"name": ""}, headers=auth_headers(user.id))
    assert resp.status_code == 422
