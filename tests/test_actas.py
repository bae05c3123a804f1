from datetime import date

from app.models.inbound import InboundMovement
from app.models.outbound import OutboundMovement
from app.utils.actas import format_acta, next_acta_number


def test_next_acta_number():
    assert next_acta_number("ACT-2024-002", "ACT", 2024) == "ACT-2024-003"
    assert next_acta_number("ACT-2024-099", "ACT", 2024) == "ACT-2024-100"
    assert next_acta_number(None, "ACT", 2024) == "ACT-2024-001"
    assert next_acta_number("sin-formato", "ACT", 2024) == "ACT-2024-001"


def test_format_acta_pads_to_three_digits():
    assert format_acta("SAL", 2025, 7) == "SAL-2025-007"
    assert format_acta("SAL", 2025, 1234) == "SAL-2025-1234"


def test_inbound_suggestion(client, user_headers, factory, regular):
    for numero in ("ACT-2024-001", "ACT-2024-002", "ACT-2023-015"):
        factory.save(
            InboundMovement(
                numero_acta=numero,
                fecha_entrada=date(2024, 1, 10),
                proveedor="Proveedor",
                id_usuario_registrador=regular.id_usuario,
            )
        )

    response = client.get(
        "/entradas/ultimo-numero/sugerencia?anio=2024", headers=user_headers
    )
    assert response.status_code == 200
    assert response.json() == {"sugerencia": "ACT-2024-003"}

    response = client.get(
        "/entradas/ultimo-numero/sugerencia?anio=2025", headers=user_headers
    )
    assert response.json() == {"sugerencia": "ACT-2025-001"}


def test_outbound_suggestion_defaults_to_current_year(client, user_headers):
    response = client.get("/salidas/ultimo-numero/sugerencia", headers=user_headers)
    assert response.status_code == 200
    assert response.json() == {"sugerencia": f"SAL-{date.today().year}-001"}


def test_outbound_suggestion_with_custom_prefix(client, user_headers, factory, regular):
    factory.save(
        OutboundMovement(
            numero_acta_salida="DON-2024-004",
            fecha_salida=date(2024, 2, 1),
            beneficiario="Hospital",
            id_usuario_registrador=regular.id_usuario,
        )
    )
    response = client.get(
        "/salidas/ultimo-numero/sugerencia?prefijo=DON&anio=2024", headers=user_headers
    )
    assert response.json() == {"sugerencia": "DON-2024-005"}
