from pydantic import BaseModel


class OperationResult(BaseModel):
    """Respuesta de los borrados: `{success, message}`."""

    success: bool = True
    message: str


class ActaSuggestion(BaseModel):
    sugerencia: str
