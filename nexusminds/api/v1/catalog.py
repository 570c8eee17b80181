"""Completion model catalog routes - V1."""

from fastapi import APIRouter, Depends

from ...models.catalog import ModelCatalogResponse
from ...services import CompletionError, CompletionService
from ...utils.logger import get_app_logger
from .deps import get_completion_service

router = APIRouter(prefix="/api/v1/models", tags=["Models"])
logger = get_app_logger()

# Served when the provider catalog cannot be read
DEFAULT_MODELS = ["llama3-70b-8192", "llama3-8b-8192", "gemma-7b-it"]


@router.get("", response_model=ModelCatalogResponse)
async def list_models(
    completion_service: CompletionService = Depends(get_completion_service)
):
    """List completion models, falling back to a built-in list when the provider is unreachable."""
    try:
        models = await completion_service.list_models()
    except CompletionError as e:
        logger.warning(f"Model catalog unavailable, serving defaults: {e}")
        return ModelCatalogResponse(models=DEFAULT_MODELS, total=len(DEFAULT_MODELS), source="default")

    return ModelCatalogResponse(models=models, total=len(models), source="live")
