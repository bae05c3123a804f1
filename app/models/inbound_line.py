from sqlmodel import SQLModel, Field


class InboundMovementLine(SQLModel, table=True):
    __tablename__ = "detalle_entradas"

    id_detalle: int = Field(default=None, primary_key=True, nullable=False)
    id_entrada: int = Field(
        foreign_key="entradas.id_entrada", nullable=False, ondelete="CASCADE"
    )
    id_lote: int = Field(foreign_key="lotes.id_lote", nullable=False)
    cantidad_recibida: int = Field(nullable=False, ge=1)
    id_usuario_registrador: int = Field(foreign_key="usuarios.id_usuario", nullable=False)
