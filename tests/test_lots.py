from datetime import date, timedelta

import pytest

from app.models.lot import Lot
from app.utils.errors import ValidationError
from app.utils.validation import expiry_status, validate_expiry_date

FUTURE = date.today() + timedelta(days=90)


def _lot_payload(id_producto, **overrides):
    payload = {
        "id_producto": id_producto,
        "numero_lote": "L-001",
        "fecha_vencimiento": FUTURE.isoformat(),
        "cantidad_inicial": 25,
    }
    payload.update(overrides)
    return payload


def test_create_lot_sets_stock_to_initial_quantity(client, user_headers, factory, regular):
    producto = factory.product("P001")
    response = client.post(
        "/lotes/", json=_lot_payload(producto.id_producto), headers=user_headers
    )
    assert response.status_code == 201
    lote = response.json()["lote"]
    assert lote["stock_actual"] == 25
    assert lote["cantidad_inicial"] == 25
    assert lote["estado"] == "disponible"
    assert lote["producto"]["codigo"] == "P001"
    assert lote["id_usuario_creador"] == regular.id_usuario


@pytest.mark.parametrize("dias", [0, -1])
def test_create_lot_rejects_non_future_expiry(client, user_headers, factory, dias):
    producto = factory.product("P001")
    fecha = (date.today() + timedelta(days=dias)).isoformat()
    response = client.post(
        "/lotes/",
        json=_lot_payload(producto.id_producto, fecha_vencimiento=fecha),
        headers=user_headers,
    )
    assert response.status_code == 400
    assert response.json() == {"error": "La fecha de vencimiento debe ser futura"}
    assert factory.count(Lot) == 0


def test_create_lot_rejects_zero_quantity(client, user_headers, factory):
    producto = factory.product("P001")
    response = client.post(
        "/lotes/",
        json=_lot_payload(producto.id_producto, cantidad_inicial=0),
        headers=user_headers,
    )
    assert response.status_code == 400
    assert response.json() == {"error": "La cantidad inicial debe ser mayor a 0"}


def test_duplicate_lot_number(client, user_headers, factory):
    producto = factory.product("P001")
    factory.lot(producto.id_producto, "L-001")
    response = client.post(
        "/lotes/", json=_lot_payload(producto.id_producto), headers=user_headers
    )
    assert response.status_code == 400
    assert response.json() == {"error": "El número de lote ya existe"}


def test_lot_for_unknown_product(client, user_headers):
    response = client.post("/lotes/", json=_lot_payload(999), headers=user_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "El producto seleccionado no existe"}


def test_update_lot(client, user_headers, factory):
    producto = factory.product("P001")
    lote = factory.lot(producto.id_producto)
    nueva = (date.today() + timedelta(days=400)).isoformat()
    response = client.put(
        f"/lotes/{lote.id_lote}",
        json={"fecha_vencimiento": nueva, "estado": "bloqueado"},
        headers=user_headers,
    )
    assert response.status_code == 200
    body = response.json()["lote"]
    assert body["fecha_vencimiento"] == nueva
    assert body["estado"] == "bloqueado"
    assert body["stock_actual"] == lote.stock_actual


def test_update_lot_past_expiry(client, user_headers, factory):
    producto = factory.product("P001")
    lote = factory.lot(producto.id_producto)
    response = client.put(
        f"/lotes/{lote.id_lote}",
        json={"fecha_vencimiento": date.today().isoformat()},
        headers=user_headers,
    )
    assert response.status_code == 400


def test_update_missing_lot(client, user_headers):
    response = client.put("/lotes/404", json={"estado": "x"}, headers=user_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Lote no encontrado"}


def test_delete_lot_with_movements(client, user_headers, factory):
    producto = factory.product("P001")
    lote = factory.lot(producto.id_producto, cantidad_inicial=10, stock_actual=7)
    response = client.delete(f"/lotes/{lote.id_lote}", headers=user_headers)
    assert response.status_code == 400
    assert response.json() == {
        "error": "No se puede eliminar el lote porque tiene movimientos de stock"
    }
    assert factory.get(Lot, lote.id_lote) is not None


def test_delete_untouched_lot(client, user_headers, factory):
    producto = factory.product("P001")
    lote = factory.lot(producto.id_producto)
    response = client.delete(f"/lotes/{lote.id_lote}", headers=user_headers)
    assert response.status_code == 200
    assert factory.get(Lot, lote.id_lote) is None


def test_expiring_lots_window(client, user_headers, factory):
    producto = factory.product("P001")
    today = date.today()
    factory.lot(producto.id_producto, "L-10", today + timedelta(days=10))
    factory.lot(producto.id_producto, "L-5", today + timedelta(days=5))
    factory.lot(producto.id_producto, "L-40", today + timedelta(days=40))
    factory.lot(producto.id_producto, "L-PASADO", today - timedelta(days=2))
    factory.lot(producto.id_producto, "L-AGOTADO", today + timedelta(days=3), estado="agotado")

    response = client.get("/lotes/alertas/vencimientos", headers=user_headers)
    assert response.status_code == 200
    body = response.json()
    assert [l["numero_lote"] for l in body["lotes"]] == ["L-5", "L-10"]
    assert body["total"] == 2

    response = client.get("/lotes/alertas/vencimientos?dias=60", headers=user_headers)
    assert [l["numero_lote"] for l in response.json()["lotes"]] == ["L-5", "L-10", "L-40"]


def test_lots_by_product(client, user_headers, factory):
    uno = factory.product("P001")
    otro = factory.product("P002")
    factory.lot(uno.id_producto, "A")
    factory.lot(otro.id_producto, "B")
    response = client.get(f"/lotes/producto/{uno.id_producto}", headers=user_headers)
    assert [l["numero_lote"] for l in response.json()["lotes"]] == ["A"]


def test_expiry_status_boundaries():
    hoy = date(2024, 6, 1)
    assert expiry_status(date(2024, 5, 31), hoy) == "vencido"
    assert expiry_status(hoy, hoy) == "por_vencer"
    assert expiry_status(date(2024, 7, 1), hoy) == "por_vencer"
    assert expiry_status(date(2024, 7, 2), hoy) == "vigente"


def test_validate_expiry_date_today_is_rejected():
    with pytest.raises(ValidationError):
        validate_expiry_date(date(2024, 6, 1), today=date(2024, 6, 1))
    validate_expiry_date(date(2024, 6, 2), today=date(2024, 6, 1))


def test_create_lot_rejects_blank_number(client, user_headers, factory):
    producto = factory.product("P001")
    response = client.post(
        "/lotes/",
        json=_lot_payload(producto.id_producto, numero_lote="   "),
        headers=user_headers,
    )
    assert response.status_code == 400
    assert response.json() == {"error": "El número de lote es requerido"}
    assert factory.count(Lot) == 0


def test_update_lot_rejects_blank_number(client, user_headers, factory):
    producto = factory.product("P001")
    lote = factory.lot(producto.id_producto, "L-001")
    response = client.put(
        f"/lotes/{lote.id_lote}", json={"numero_lote": "  "}, headers=user_headers
    )
    assert response.status_code == 400
    assert response.json() == {"error": "El número de lote es requerido"}
    assert factory.get(Lot, lote.id_lote).numero_lote == "L-001"


def test_update_missing_lot_with_past_expiry_is_not_found(client, user_headers):
    response = client.put(
        "/lotes/404",
        json={"fecha_vencimiento": "2020-01-01"},
        headers=user_headers,
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Lote no encontrado"}
