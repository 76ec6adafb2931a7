import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("transporte.errors")


class DomainError(Exception):
    """Base for failures a handler reports to the caller."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Requisição inválida"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Dados inválidos"


class Unauthenticated(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Não autenticado"


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Permissão insuficiente para acessar este recurso"


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Recurso não encontrado"


class Conflict(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflito com o estado atual do recurso"


def _error_body(message, **extra):
    body = {"success": False, "error": message}
    body.update(extra)
    return body


async def domain_error_handler(request: Request, exc: DomainError):
    headers = None
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message), headers=headers)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Dados inválidos", details=jsonable_encoder(exc.errors())),
    )


async def unexpected_error_handler(request: Request, exc: Exception):
    # detail stays server side
    logger.exception(f"Erro inesperado em {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Erro interno do servidor"),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
