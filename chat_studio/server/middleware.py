from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from chat_studio.services import GenerationGateway
from chat_studio.utils import g_config
from chat_studio.utils.errors import InvalidInputError


def error_response(status_code: int, message: str) -> ORJSONResponse:
    return ORJSONResponse(status_code=status_code, content={"error": message})


def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


def invalid_input_handler(request: Request, exc: InvalidInputError):
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        location = ".".join(str(loc) for loc in err.get("loc", ()) if loc != "body")
        messages.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    logger.debug(f"Rejected malformed request to {request.url.path}: {messages}")
    return error_response(status.HTTP_400_BAD_REQUEST, "; ".join(messages) or "Invalid request")


def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}: {exc}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Unexpected error")


def get_gateway(request: Request) -> GenerationGateway:
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise HTTPException(
            status.HTTP_503_SERVICE_UNAVAILABLE, detail="Gemini client is not configured"
        )
    return gateway


def verify_api_key(
    credentials: HTTPAuthorizationCredentials = Depends(HTTPBearer(auto_error=False)),
):
    if not g_config.server.api_key:
        return ""

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail="Invalid or missing token")

    api_key = credentials.credentials
    if api_key != g_config.server.api_key:
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail="Wrong API key")

    return api_key


def add_exception_handler(app: FastAPI):
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(InvalidInputError, invalid_input_handler)
    app.add_exception_handler(Exception, global_exception_handler)


def add_cors_middleware(app: FastAPI):
    if g_config.cors.enabled:
        cors = g_config.cors
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors.allow_origins,
            allow_credentials=cors.allow_credentials,
            allow_methods=cors.allow_methods,
            allow_headers=cors.allow_headers,
        )
