from fastapi import APIRouter, Depends, status
from loguru import logger

from chat_studio.models import (
    ErrorResponse,
    GenerationConfig,
    GenerationFailure,
    GenerationResult,
    HealthCheckResponse,
    ImageRequest,
    TextRequest,
    TextResponse,
)
from chat_studio.server.middleware import error_response, get_gateway, verify_api_key
from chat_studio.services import GenerationGateway, build_conversation, build_text_conversation

router = APIRouter()

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


@router.get("/health", response_model=HealthCheckResponse, tags=["Health"])
async def health_check(gateway: GenerationGateway = Depends(get_gateway)):
    return HealthCheckResponse(
        ok=True, text_model=gateway.text_model, image_model=gateway.image_model
    )


@router.post("/image", response_model=GenerationResult, responses=ERROR_RESPONSES, tags=["Gemini"])
async def generate_image(
    request: ImageRequest,
    api_key: str = Depends(verify_api_key),
    gateway: GenerationGateway = Depends(get_gateway),
):
    # Raises InvalidInputError ("Prompt is required") -> 400
    contents = build_conversation(request.history, request.prompt, request.images)
    config = GenerationConfig.for_response_type(request.response_type, request.aspect_ratio)

    outcome = await gateway.generate(contents, config)
    if isinstance(outcome, GenerationFailure):
        logger.error(f"/image failed ({outcome.kind}): {outcome.message}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, outcome.message)

    return outcome


@router.post("/text", response_model=TextResponse, responses=ERROR_RESPONSES, tags=["Gemini"])
async def generate_text(
    request: TextRequest,
    api_key: str = Depends(verify_api_key),
    gateway: GenerationGateway = Depends(get_gateway),
):
    # Raises InvalidInputError ("Provide a prompt or files") -> 400
    contents = build_text_conversation(request.history, request.prompt, request.files)

    outcome = await gateway.chat(contents)
    if isinstance(outcome, GenerationFailure):
        logger.error(f"/text failed: {outcome.message}")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, outcome.message)

    return TextResponse(text=outcome)
