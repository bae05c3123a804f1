from sqlmodel import SQLModel, Field


class OutboundMovementLine(SQLModel, table=True):
    __tablename__ = "detalle_salidas"

    id_detalle: int = Field(default=None, primary_key=True, nullable=False)
    id_salida: int = Field(
        foreign_key="salidas.id_salida", nullable=False, ondelete="CASCADE"
    )
    id_lote: int = Field(foreign_key="lotes.id_lote", nullable=False)
    cantidad: int = Field(nullable=False, ge=1)  # Nunca mayor que el stock del lote al registrar
    id_usuario_registrador: int = Field(foreign_key="usuarios.id_usuario", nullable=False)
