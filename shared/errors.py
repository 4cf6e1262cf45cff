"""Error types surfaced by the advisor.

Every error carries a message that can be shown to the user as-is.
"""


class AdvisorError(Exception):
    """Base class for recoverable advisor errors."""

    default_message = "Se produjo un error inesperado."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def user_message(self) -> str:
        return str(self)


class ValidationError(AdvisorError):
    """Invalid user input; nothing was changed and nothing was called."""

    default_message = "Los datos introducidos no son válidos."


class GenerationInProgressError(ValidationError):
    default_message = "Ya hay un plan generándose. Espera a que termine."


class GenerationError(AdvisorError):
    """The plan-generation collaborator failed."""

    default_message = "Hubo un error al generar el plan. Por favor, inténtalo de nuevo."


class PersistenceError(AdvisorError):
    """Writing the project list to local storage failed."""

    default_message = "No se pudo guardar en el almacenamiento local."


class StorageQuotaExceededError(PersistenceError):
    default_message = "El almacenamiento local está lleno. Elimina proyectos antiguos e inténtalo de nuevo."


class ImportFormatError(AdvisorError):
    """An imported file is not a valid saved project."""

    default_message = "El archivo no es un proyecto válido."


class ChatError(AdvisorError):
    default_message = "Error en la comunicación del chat."


class StorageReadError(PersistenceError):
    """The saved project list could not be read; writes are refused until it can."""

    default_message = "No se pudo leer el almacenamiento local. Los proyectos no se modificarán hasta que vuelva a estar disponible."
