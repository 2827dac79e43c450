"""
test_production_routes.py — API tests for /api/production/* and /health.

Uses FastAPI's TestClient against the in-process app; no database, no network.
"""

import logging

import pytest


class TestBomEndpoints:

    def test_bom_totals(self, api_client):
        resp = api_client.post("/api/production/bom/totals", json={
            "product_code": "PAO",
            "lot_size": 10,
            "items": [
                {"component_code": "FARINHA", "quantity": 2, "unit_cost": 5},
                {"component_code": "FERMENTO", "quantity": 1, "unit_cost": 10},
            ],
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["ingredients"] == pytest.approx(20.0)
        assert body["total"] == pytest.approx(27.0)
        assert body["unit"] == pytest.approx(2.7)
        assert body["margin_achieved"] == 0.0

    @pytest.mark.parametrize("item", [
        {"component_code": "", "quantity": 1, "unit_cost": 1},
        {"component_code": "X" * 81, "quantity": 1, "unit_cost": 1},
        {"component_code": "X", "quantity": 0, "unit_cost": 1},
        {"component_code": "X", "quantity": 1, "unit_cost": -1},
    ])
    def test_bom_totals_rejects_invalid_lines(self, api_client, item):
        resp = api_client.post("/api/production/bom/totals", json={"items": [item]})
        assert resp.status_code == 422

    def test_bom_summary_accepts_loose_backend_record(self, api_client, bom_api_record):
        resp = api_client.post("/api/production/bom/summary", json=bom_api_record)
        assert resp.status_code == 200
        body = resp.json()
        assert body["product_code"] == "BOLO-CHOC"
        assert body["total_cost"] == pytest.approx(108.0)
        assert body["unit_cost"] == pytest.approx(2.16)

    def test_bom_summary_rejects_garbage_number(self, api_client, bom_api_record):
        bom_api_record["lot_size"] = "cinquenta"
        resp = api_client.post("/api/production/bom/summary", json=bom_api_record)
        assert resp.status_code == 422
        assert "lot_size" in resp.json()["detail"]

    def test_bom_summary_rejects_number_too_large_for_float(self, api_client, bom_api_record):
        bom_api_record["lot_size"] = 10**400
        resp = api_client.post("/api/production/bom/summary", json=bom_api_record)
        assert resp.status_code == 422
        assert "lot_size" in resp.json()["detail"]

    def test_bom_summary_display_columns(self, api_client, bom_api_record):
        """ingredients 80, total 108, unit 108 / 50 = 2.16, margin (3.5 − 2.16) / 3.5 = 38.29%."""
        resp = api_client.post("/api/production/bom/summary?display=true", json=bom_api_record)
        assert resp.status_code == 200
        display = resp.json()["display"]
        assert display["ingredients"] == "R$ 80,00"
        assert display["total_cost"] == "R$ 108,00"
        assert display["unit_cost"] == "R$ 2,16"
        assert display["margin_achieved"] == "38,29%"

    def test_bom_summary_without_display_flag(self, api_client, bom_api_record):
        resp = api_client.post("/api/production/bom/summary", json=bom_api_record)
        assert "display" not in resp.json()


class TestOrderEndpoints:

    def test_preview_with_reference_bom(self, api_client):
        resp = api_client.post("/api/production/orders/preview", json={
            "quantity_planned": 1000,
            "reference_bom": {
                "product_code": "PAO",
                "lot_size": 10,
                "items": [{"component_code": "FARINHA", "quantity": 20, "unit_cost": 1}],
            },
        })
        assert resp.status_code == 200
        assert resp.json()["unit"] == pytest.approx(27.0 / 1000)

    def test_preview_without_reference_bom(self, api_client):
        resp = api_client.post("/api/production/orders/preview", json={"quantity_planned": 1000})
        assert resp.status_code == 200
        assert resp.json()["unit"] == pytest.approx(2.7)

    def test_projection_from_markup(self, api_client):
        resp = api_client.post("/api/production/orders/projection", json={
            "bom_items": [
                {"component_code": "MP-001", "quantity": 0.5, "unit_cost": 4},
                {"component_code": "MP-002", "quantity": 0.1, "unit_cost": 10},
            ],
            "quantity_planned": 100,
            "boxes_qty": 10,
            "box_cost": 1.5,
            "labor_per_unit": 0.35,
            "markup": 50,
            "post_sale_tax": 10,
            "price_driver": "markup",
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["production_unit_cost"] == pytest.approx(3.5)
        assert body["sale_price"] == pytest.approx(5.25)
        assert body["markup"] == 50
        assert body["bom_totals"]["total_cost"] == pytest.approx(300.0)
        assert body["profit_total"] == pytest.approx(122.5)

    def test_projection_display_panel(self, api_client):
        resp = api_client.post("/api/production/orders/projection?display=true", json={
            "bom_items": [{"component_code": "MP-001", "quantity": 0.5, "unit_cost": 7}],
            "quantity_planned": 100,
            "markup": 50,
        })
        assert resp.status_code == 200
        display = resp.json()["display"]
        assert display["production_unit_cost"] == "R$ 3,50"
        assert display["sale_price"] == "R$ 5,25"
        assert display["markup"] == "50,00%"
        assert display["revenue_total"] == "R$ 525,00"

    def test_projection_from_sale_price(self, api_client):
        resp = api_client.post("/api/production/orders/projection", json={
            "bom_items": [{"component_code": "MP-001", "quantity": 0.75, "unit_cost": 4}],
            "quantity_planned": 10,
            "sale_price": 4.5,
            "markup": 999,
            "price_driver": "sale_price",
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["sale_price"] == 4.5
        assert body["markup"] == pytest.approx(50.0)

    def test_projection_zero_quantity_is_finite(self, api_client):
        resp = api_client.post("/api/production/orders/projection", json={
            "bom_items": [{"component_code": "MP-001", "quantity": 1, "unit_cost": 4}],
            "quantity_planned": 0,
            "boxes_qty": 3,
            "box_cost": 2,
            "markup": 30,
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["base_unit_material_cost"] == 0.0
        assert body["packaging_unit_cost"] == 0.0
        assert body["production_unit_cost"] == 0.0
        assert body["sale_price"] == 0.0

    def test_projection_rejects_unknown_driver(self, api_client):
        resp = api_client.post("/api/production/orders/projection", json={
            "quantity_planned": 10, "price_driver": "margin",
        })
        assert resp.status_code == 422


class TestPricingEndpoints:

    def test_sale_price(self, api_client):
        resp = api_client.post("/api/production/pricing/sale-price", json={"unit_cost": 3.0, "markup": 50})
        assert resp.status_code == 200
        assert resp.json()["sale_price"] == pytest.approx(4.5)

    def test_markup(self, api_client):
        resp = api_client.post("/api/production/pricing/markup", json={"unit_cost": 3.0, "sale_price": 4.5})
        assert resp.json()["markup"] == pytest.approx(50.0)

    def test_markup_without_cost(self, api_client):
        resp = api_client.post("/api/production/pricing/markup", json={"unit_cost": 0, "sale_price": 4.5})
        assert resp.json()["markup"] == 0.0


class TestServiceEndpoints:

    def test_health(self, api_client):
        resp = api_client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_request_id_header_echoed(self, api_client):
        resp = api_client.post(
            "/api/production/pricing/markup",
            json={"unit_cost": 1, "sale_price": 2},
            headers={"X-Request-ID": "dash-42"},
        )
        assert resp.headers["X-Request-ID"] == "dash-42"
        assert "X-Process-Time" in resp.headers


class TestCompletionLogging:
    """Priced requests log the product / driver they were computed for."""

    @staticmethod
    def _records(caplog, message):
        return [r for r in caplog.records if r.getMessage() == message]

    def test_bom_summary_logs_product_code(self, api_client, bom_api_record, caplog):
        caplog.set_level(logging.INFO, logger="erp-costing-api")
        api_client.post(
            "/api/production/bom/summary", json=bom_api_record, headers={"X-Request-ID": "dash-7"},
        )
        (record,) = self._records(caplog, "BOM summarized")
        assert record.product_code == "BOLO-CHOC"
        assert record.line_count == 2
        assert record.request_id == "dash-7"
        assert record.unit_cost == pytest.approx(2.16)

    def test_projection_logs_price_driver(self, api_client, caplog):
        caplog.set_level(logging.INFO, logger="erp-costing-api")
        api_client.post("/api/production/orders/projection", json={
            "bom_items": [{"component_code": "MP-001", "quantity": 0.75, "unit_cost": 4}],
            "quantity_planned": 10,
            "sale_price": 4.5,
            "price_driver": "sale_price",
        })
        (record,) = self._records(caplog, "Order projection computed")
        assert record.price_driver == "sale_price"
        assert record.quantity_planned == 10
        assert record.line_count == 1

    def test_rejected_record_logged_as_warning(self, api_client, bom_api_record, caplog):
        caplog.set_level(logging.INFO, logger="erp-costing-api")
        bom_api_record["lot_size"] = "cinquenta"
        api_client.post("/api/production/bom/summary", json=bom_api_record)
        rejected = [r for r in caplog.records if r.getMessage().startswith("Rejected BOM record")]
        assert rejected and rejected[0].product_code == "BOLO-CHOC"
        completed = self._records(caplog, "request completed")
        assert completed[-1].levelno == logging.WARNING
        assert completed[-1].http_status == 422
