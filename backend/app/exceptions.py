"""
Coleta Backend — Custom Exception Hierarchy
=============================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Services raise domain errors; global handlers (registered in main.py)
       turn them into structured JSON responses with the right status code.
How:   Each exception class carries a client-safe message and an optional
       context dict (logged, only partially exposed).

Exception Hierarchy:
    ColetaError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── PreconditionError        → 400 Bad Request (worker state forbids the action)
    ├── AuthenticationError      → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found
    └── DatabaseError            → 500 Internal Server Error

Messages are in Portuguese: they are shown verbatim by the mobile client.
"""

from typing import Any, Dict, Optional


class ColetaError(Exception):
    """
    Base exception for all Coleta application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "Ocorreu um erro inesperado.",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ColetaError):
    """
    Raised when client input fails a business validation rule.

    HTTP: 400 Bad Request. Schema-level failures raised by FastAPI itself
    (RequestValidationError) are mapped to the same status in main.py.
    """

    def __init__(
        self,
        message: str = "Dados inválidos.",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class PreconditionError(ColetaError):
    """
    Raised when the authenticated worker is not in a state that allows the
    operation, e.g. recording a weighing without belonging to a cooperative.

    HTTP: 400 Bad Request
    """

    def __init__(
        self,
        message: str = "Operação não permitida para o trabalhador autenticado.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(ColetaError):
    """
    Raised for missing/invalid/expired tokens and wrong credentials.

    HTTP: 401 Unauthorized

    Login deliberately uses one message for "unknown CPF" and "wrong password"
    so the response does not reveal which CPFs are registered.
    """

    def __init__(
        self,
        message: str = "Não autorizado.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ColetaError):
    """
    Raised when a requested resource does not exist.

    HTTP: 404 Not Found

    SQLAlchemy returns None for missing records; services convert that
    into NotFoundError so the route layer stays free of status-code logic.
    """

    def __init__(
        self,
        message: str = "Recurso não encontrado.",
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(ColetaError):
    """
    Raised when database operations fail unexpectedly.

    HTTP: 500 Internal Server Error

    The message returned to the client is always generic. Query text,
    constraint names and driver errors are logged server-side only.
    """

    def __init__(
        self,
        message: str = "Erro interno ao acessar o banco de dados.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
