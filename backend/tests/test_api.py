"""HTTP surface: status codes and error bodies."""
from main import app
from utils.auth_utils import get_current_user


def _farmer_loading(bill_no="F-1", **overrides):
    body = {
        "source": "farmer",
        "bill_no": bill_no,
        "party_name": "Murugan",
        "village": "Pulicat",
        "loading_date": "2026-01-15",
        "items": [{"variety_code": "ROH", "no_trays": 10, "loose": 5, "price_per_kg": 100}],
    }
    body.update(overrides)
    return body


class TestLoadingEndpoints:
    def test_create_and_fetch(self, client):
        response = client.post("/loadings/", json=_farmer_loading())
        assert response.status_code == 201
        data = response.json()
        assert float(data["grand_total"]) == 33725.0
        assert float(data["items"][0]["total_kgs"]) == 355.0
        assert data["created_by"] == "tester@example.com"

        fetched = client.get(f"/loadings/{data['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["bill_no"] == "F-1"

    def test_free_text_quantities_are_coerced(self, client):
        body = _farmer_loading(items=[{"variety_code": "ROH", "no_trays": "2.7", "loose": "abc", "price_per_kg": "10"}])
        response = client.post("/loadings/", json=body)
        assert response.status_code == 201
        assert response.json()["items"][0]["no_trays"] == 2

    def test_duplicate_bill_is_409(self, client):
        client.post("/loadings/", json=_farmer_loading())
        response = client.post("/loadings/", json=_farmer_loading())
        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    def test_zero_quantity_is_400(self, client):
        body = _farmer_loading(items=[{"variety_code": "ROH", "no_trays": 0, "loose": 0}])
        response = client.post("/loadings/", json=body)
        assert response.status_code == 400
        assert response.json() == {"detail": "Enter trays or loose", "code": "VALIDATION_ERROR"}

    def test_missing_loading_is_404(self, client):
        assert client.get("/loadings/999").status_code == 404

    def test_tenant_isolation(self, client):
        created = client.post("/loadings/", json=_farmer_loading()).json()
        response = client.get(f"/loadings/{created['id']}", headers={"X-Tenant-ID": "tenant-b"})
        assert response.status_code == 404

    def test_stock_exceeded_body(self, client):
        client.post("/loadings/", json=_farmer_loading(items=[{"variety_code": "X", "no_trays": 2, "loose": 30}]))
        client_bill = client.post("/loadings/", json={
            "source": "client",
            "bill_no": "C-1",
            "party_name": "Hotel Sea",
            "loading_date": "2026-01-16",
            "vehicle_id": "V-1",
            "items": [{"variety_code": "X", "loose": 60}, {"variety_code": "X", "loose": 30}],
        }).json()
        first_id = min(i["id"] for i in client_bill["items"])

        ok = client.patch(f"/loadings/items/{first_id}", json={"loose": 50})
        assert ok.status_code == 200

        rejected = client.patch(f"/loadings/items/{first_id}", json={"loose": 80})
        assert rejected.status_code == 409
        assert rejected.json()["code"] == "STOCK_EXCEEDED"
        assert rejected.json()["max_allowed"] == 70.0

    def test_delete_last_item_removes_loading(self, client):
        created = client.post("/loadings/", json=_farmer_loading()).json()
        response = client.delete(f"/loadings/items/{created['items'][0]['id']}")
        assert response.status_code == 200
        assert response.json()["deleted_parent_loading"] is True
        assert client.get(f"/loadings/{created['id']}").status_code == 404

    def test_recompute(self, client):
        created = client.post("/loadings/", json=_farmer_loading()).json()
        response = client.post(f"/loadings/{created['id']}/recompute")
        assert response.status_code == 200
        assert response.json()["grand_total"] == created["grand_total"]


class TestChargeEndpoints:
    def test_transport_without_vehicle_is_422(self, client):
        created = client.post("/loadings/", json={
            "source": "client",
            "bill_no": "C-9",
            "party_name": "Hotel Sea",
            "loading_date": "2026-01-16",
            "items": [{"variety_code": "ROH", "no_trays": 1, "price_per_kg": 10}],
        }).json()
        client.post("/packing-amounts/", json={"source_record_id": created["id"], "ice_blocks": 1})
        response = client.post("/dispatch-charges/", json={
            "source_record_id": created["id"], "type": "TRANSPORT", "amount": 500,
        })
        assert response.status_code == 422
        assert response.json()["code"] == "VEHICLE_REQUIRED"
        assert client.get("/dispatch-charges/", params={"source_record_id": created["id"]}).json() == []


class TestPaymentEndpoints:
    def _client_party(self, client):
        return client.post("/parties/", json={"name": "Hotel Sea", "party_type": "Client"}).json()

    def test_record_and_reconcile(self, client):
        party = self._client_party(client)
        client.post("/loadings/", json={
            "source": "client",
            "bill_no": "C-2",
            "party_id": party["id"],
            "loading_date": "2026-01-16",
            "vehicle_id": "V-1",
            "items": [{"variety_code": "ROH", "loose": 10000, "price_per_kg": 100}],
        })
        payment = client.post("/payments/client", json={
            "party_id": party["id"], "amount": 4000, "payment_date": "2026-01-17", "payment_mode": "CASH",
        })
        assert payment.status_code == 201
        assert payment.json()["party_id"] == party["id"]

        outstanding = client.get(f"/reconciliation/outstanding/{party['id']}").json()
        assert float(outstanding["due"]) == 6000.0

        ageing = client.get("/reconciliation/ageing", params={"as_of": "2026-01-26"}).json()
        assert [float(b["amount"]) for b in ageing["buckets"]] == [0.0, 6000.0, 0.0, 0.0]

    def test_payment_requires_payment_group(self, client):
        party = self._client_party(client)
        app.dependency_overrides[get_current_user] = lambda: {"sub": "clerk", "cognito:groups": ["viewer"]}
        response = client.post("/payments/client", json={
            "party_id": party["id"], "amount": 10, "payment_date": "2026-01-17",
        })
        assert response.status_code == 403

    def test_invoice_issue_and_pdf(self, client):
        party = self._client_party(client)
        payment = client.post("/payments/client", json={
            "party_id": party["id"], "amount": 1500, "payment_date": "2026-01-17",
        }).json()
        invoice = client.put("/invoices/client", json={"payment_id": payment["id"]})
        assert invoice.status_code == 200
        assert invoice.json()["invoice_no"] == 1

        pdf = client.get(f"/invoices/client/by-payment/{payment['id']}/pdf")
        assert pdf.status_code == 200
        assert pdf.headers["content-type"] == "application/pdf"

    def test_vendor_payment_keeps_bank_details(self, client):
        farmer = client.post("/parties/", json={"name": "Murugan", "party_type": "Farmer"}).json()
        response = client.post("/payments/vendor", json={
            "party_id": farmer["id"],
            "amount": 900,
            "payment_date": "2026-01-21",
            "payment_mode": "AC",
            "reference": "NEFT0042",
            "account_number": " 00112233 ",
            "ifsc": "sbin0001234",
            "bank_name": "State Bank of India",
            "is_installment": True,
            "installments": 3,
            "installment_number": 1,
        })
        assert response.status_code == 201
        data = response.json()
        assert data["account_number"] == "00112233"
        assert data["ifsc"] == "SBIN0001234"
        assert (data["installments"], data["installment_number"]) == (3, 1)

        client.put("/invoices/vendor", json={"payment_id": data["id"]})
        pdf = client.get(f"/invoices/vendor/by-payment/{data['id']}/pdf")
        assert pdf.status_code == 200

    def test_client_payment_rejects_bank_details(self, client):
        party = self._client_party(client)
        response = client.post("/payments/client", json={
            "party_id": party["id"], "amount": 100, "payment_date": "2026-01-17", "ifsc": "SBIN0001234",
        })
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestRequestContext:
    def test_missing_tenant_header(self, client):
        response = client.get("/loadings/", headers={"X-Tenant-ID": ""})
        assert response.status_code == 400

    def test_missing_token_is_401(self, client):
        app.dependency_overrides.clear()
        response = client.post("/loadings/", json=_farmer_loading())
        assert response.status_code == 401
