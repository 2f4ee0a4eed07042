from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse
from loguru import logger

from chat_studio.server.chat import router as chat_router
from chat_studio.server.middleware import add_cors_middleware, add_exception_handler
from chat_studio.services import GenerationGateway, create_genai_client
from chat_studio.utils import g_config
from chat_studio.utils.errors import ConfigurationError


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.gateway is None:
        try:
            client = create_genai_client(g_config.gemini)
            app.state.gateway = GenerationGateway(
                client,
                text_model=g_config.gemini.text_model,
                image_model=g_config.gemini.image_model,
            )
        except ConfigurationError as e:
            # Serve anyway; generation endpoints answer 503 until the key is configured.
            logger.error(f"Gemini client not initialized: {e}")
    yield


def create_app(gateway: GenerationGateway | None = None) -> FastAPI:
    app = FastAPI(
        title="Gemini Chat Studio",
        description="Chat and image generation backend for Gemini",
        version="0.1.0",
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
    )
    app.state.gateway = gateway

    add_cors_middleware(app)
    add_exception_handler(app)

    app.include_router(chat_router)
    return app
