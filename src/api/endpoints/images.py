from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_image_batch
from src.integrations.services.image_batch_service import ImageBatchService

router = APIRouter()


@router.get("/", tags=["Images"])
async def generate_images(
    prompt: Optional[str] = Query(default=None),
    width: Optional[str] = Query(default=None),
    height: Optional[str] = Query(default=None),
    seed: Optional[str] = Query(default=None),
    num_images: Optional[str] = Query(default=None, alias="numImages"),
    batch: ImageBatchService = Depends(get_image_batch),
):
    """Generate numImages images for a prompt and return them as data URIs."""
    tasks = batch.plan(prompt, num_images=num_images, seed=seed, width=width, height=height)
    image_urls = await batch.generate(tasks)
    return {"imageUrls": image_urls}
