"""End-to-end plan gating on the invoice endpoints."""
import datetime as dt

from app.models.models import Invoice


def _create(client, headers, **overrides):
    body = {"amount": "150.00", "currency": "usd"}
    body.update(overrides)
    return client.post("/invoices/", json=body, headers=headers)


def test_free_user_creates_five_invoices_then_is_blocked(client, make_user, auth_headers, db_session):
    user = make_user()
    headers = auth_headers(user.id)

    for _ in range(5):
        resp = _create(client, headers)
        assert resp.status_code == 200, resp.text

    blocked = _create(client, headers)
    assert blocked.status_code == 403
    error = blocked.json()["error"]
    assert error["code"] == "PLN001"
    assert "5" in error["message"]
    assert error["details"]["upgrade_required"] == "pro"
    assert error["details"]["denial_code"] == "LIMIT_REACHED"
    assert error["details"]["current_count"] == 5

    db_session.expire_all()
    assert db_session.query(Invoice).filter(Invoice.user_id == user.id).count() == 5


def test_upgrade_mid_month_unblocks_immediately(client, make_user, auth_headers, db_session):
    user = make_user()
    headers = auth_headers(user.id)
    for _ in range(5):
        assert _create(client, headers).status_code == 200
    assert _create(client, headers).status_code == 403

    user.plan = "pro"
    user.subscription_status = "active"
    user.current_period_end = dt.datetime.now(dt.timezone.utc) + dt.timedelta(days=31)
    db_session.commit()

    resp = _create(client, headers)
    assert resp.status_code == 200, resp.text


def test_created_invoice_fields(client, make_user, auth_headers):
    user = make_user()
    resp = _create(client, auth_headers(user.id), notes="Consulting")
    assert resp.status_code == 200
    data = resp.json()
    assert data["invoice_id"].startswith("INV-")
    assert data["currency"] == "USD"
    assert data["status"] == "draft"
    assert data["template_id"] == "modern"
    assert data["is_recurring"] is False


def test_free_user_cannot_create_recurring_invoice(client, make_user, auth_headers):
    user = make_user()
    resp = _create(client, auth_headers(user.id), is_recurring=True)
    assert resp.status_code == 403
    details = resp.json()["error"]["details"]
    assert details["action"] == "enable_recurring"
    assert details["denial_code"] == "FEATURE_LOCKED"
    assert details["upgrade_required"] == "pro"


def test_pro_user_creates_recurring_invoice(client, make_pro_user, auth_headers):
    user = make_pro_user()
    resp = _create(client, auth_headers(user.id), is_recurring=True)
    assert resp.status_code == 200, resp.text
    assert resp.json()["recurrence_interval"] == "monthly"


def test_free_user_cannot_use_premium_template(client, make_user, auth_headers):
    user = make_user()
    resp = _create(client, auth_headers(user.id), template_id="corporate")
    assert resp.status_code == 403
    details = resp.json()["error"]["details"]
    assert details["denial_code"] == "TEMPLATE_LOCKED"
    assert details["upgrade_required"] == "pro"


def test_unknown_template(client, make_pro_user, auth_headers):
    user = make_pro_user()
    resp = _create(client, auth_headers(user.id), template_id="does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "TPL001"


def test_expired_pro_user_gets_free_limits(client, make_user, auth_headers):
    user = make_user(
        plan="pro",
        subscription_status="active",
        current_period_end=dt.datetime.now(dt.timezone.utc) - dt.timedelta(days=2),
    )
    headers = auth_headers(user.id)
    for _ in range(5):
        assert _create(client, headers).status_code == 200
    blocked = _create(client, headers)
    assert blocked.status_code == 403
    assert blocked.json()["error"]["details"]["denial_code"] == "SUBSCRIPTION_INACTIVE"


def test_invoice_for_foreign_client_is_rejected(client, make_user, auth_headers):
    owner = make_user()
    other = make_user()
    created = client.post("/clients/", json={"name": "Theirs"}, headers=auth_headers(other.id))
    assert created.status_code == 200

    resp = _create(client, auth_headers(owner.id), client_id=created.json()["id"])
    assert resp.status_code == 400


def test_list_and_get_invoices(client, make_user, auth_headers):
    user = make_user()
    headers = auth_headers(user.id)
    first = _create(client, headers).json()
    _create(client, headers)

    listing = client.get("/invoices/", headers=headers)
    assert listing.status_code == 200
    assert len(listing.json()) == 2

    single = client.get(f"/invoices/{first['invoice_id']}", headers=headers)
    assert single.status_code == 200
    assert single.json()["invoice_id"] == first["invoice_id"]

    missing = client.get("/invoices/INV-NOPE", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "INV001"


def test_pdf_export_requires_paid_plan(client, make_user, auth_headers):
    user = make_user()
    headers = auth_headers(user.id)
    invoice = _create(client, headers).json()

    resp = client.get(f"/invoices/{invoice['invoice_id']}/pdf", headers=headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["details"]["action"] == "export_pdf"


def test_pdf_export_for_pro_user(client, make_pro_user, auth_headers):
    user = make_pro_user()
    headers = auth_headers(user.id)
    invoice = _create(client, headers, template_id="classic").json()

    resp = client.get(f"/invoices/{invoice['invoice_id']}/pdf", headers=headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")


def test_lapsed_pro_cannot_export(client, make_pro_user, auth_headers, db_session):
    user = make_pro_user()
    headers = auth_headers(user.id)
    invoice = _create(client, headers).json()

    user.subscription_status = "canceled"
    db_session.commit()

    resp = client.get(f"/invoices/{invoice['invoice_id']}/pdf", headers=headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["details"]["denial_code"] == "SUBSCRIPTION_INACTIVE"
