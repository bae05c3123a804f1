from datetime import date
from typing import Optional

from app.models.user import User
from app.utils.errors import ValidationError

DIAS_POR_VENCER = 30


def is_admin_user(user: Optional[User]) -> bool:
    """Devuelve True si el usuario es administrador, False en caso contrario."""
    return user is not None and (user.rol or "").lower() == "admin"


def clean_text(value: Optional[str]) -> Optional[str]:
    """Quita espacios; una cadena vacía se considera ausente."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def validate_expiry_date(fecha_vencimiento: date, today: Optional[date] = None) -> None:
    """La fecha de vencimiento de un lote tiene que ser posterior a hoy."""
    today = today or date.today()
    if fecha_vencimiento <= today:
        raise ValidationError("La fecha de vencimiento debe ser futura")


def validate_initial_quantity(cantidad: Optional[int]) -> None:
    if cantidad is None or cantidad <= 0:
        raise ValidationError("La cantidad inicial debe ser mayor a 0")


def validate_available_stock(numero_lote: str, stock_actual: int, cantidad: int) -> None:
    if cantidad > stock_actual:
        raise ValidationError(
            f"Stock insuficiente en lote {numero_lote}. "
            f"Disponible: {stock_actual}, Solicitado: {cantidad}"
        )


def lot_has_movements(stock_actual: int, cantidad_inicial: int) -> bool:
    """Un lote cuyo stock difiere de la cantidad inicial ya tuvo movimientos."""
    return stock_actual != cantidad_inicial


def expiry_status(fecha_vencimiento: date, today: Optional[date] = None) -> str:
    """
    Clasifica un lote según los días que faltan para su vencimiento:
    - vencido → fecha ya pasada
    - por_vencer → vence en 30 días o menos
    - vigente → resto
    """
    today = today or date.today()
    dias = (fecha_vencimiento - today).days
    if dias < 0:
        return "vencido"
    if dias <= DIAS_POR_VENCER:
        return "por_vencer"
    return "vigente"
