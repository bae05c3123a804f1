"""
Escrituras en varios pasos con compensación manual.

La base de datos remota no ofrece una transacción que abarque todos los pasos
(cabecera + detalle, cuenta del proveedor + fila de `usuarios`), así que cada
paso confirmado registra la acción que lo deshace. Si un paso posterior falla,
las compensaciones se ejecutan en orden inverso. El fallo de una compensación
se registra en el log y no se relanza: quien llama recibe el error original.

Uso:

    saga = Saga("entrada")
    ...  # paso confirmado
    saga.add("eliminar cabecera", lambda: borrar(cabecera_id))
    with saga:
        ...  # pasos siguientes
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List

logger = logging.getLogger(__name__)


@dataclass
class CompensationStep:
    name: str
    action: Callable[[], None]


@dataclass
class CompensationFailure:
    name: str
    error: Exception


@dataclass
class Saga:
    name: str
    steps: List[CompensationStep] = field(default_factory=list)
    failures: List[CompensationFailure] = field(default_factory=list)
    compensated: bool = False

    def add(self, name: str, action: Callable[[], None]) -> None:
        self.steps.append(CompensationStep(name=name, action=action))

    def compensate(self) -> List[CompensationFailure]:
        """Ejecuta las compensaciones pendientes en orden inverso."""
        for step in reversed(self.steps):
            try:
                step.action()
            except Exception as e:
                logger.error(
                    "Saga %s: falló la compensación '%s': %s", self.name, step.name, e
                )
                self.failures.append(CompensationFailure(name=step.name, error=e))
            else:
                logger.warning("Saga %s: compensación '%s' aplicada", self.name, step.name)
        self.steps.clear()
        self.compensated = True
        return self.failures

    def __enter__(self) -> "Saga":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            logger.warning("Saga %s: fallo (%s), revirtiendo pasos", self.name, exc)
            self.compensate()
        return False  # el error original siempre se propaga
