"""
Product catalog routes.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from orderdesk.core.logging import get_logger
from orderdesk.repositories import ProductRepository
from orderdesk.routers.deps import get_product_repository
from orderdesk.schemas import Envelope, ProductResponse, ProductUpdate

logger = get_logger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=Envelope[list[ProductResponse]])
async def list_products(
    repo: Annotated[ProductRepository, Depends(get_product_repository)],
    category: Optional[str] = None,
) -> Envelope[list[ProductResponse]]:
    products = await repo.list_products(category)
    return Envelope(data=[ProductResponse.from_product(p) for p in products])


@router.post("", status_code=status.HTTP_405_METHOD_NOT_ALLOWED)
async def create_product() -> None:
    """Products are created in Airtable directly, not through the API."""
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Product creation not supported. Add products in Airtable.",
    )


@router.get("/{product_id}", response_model=Envelope[ProductResponse])
async def get_product(
    product_id: int,
    repo: Annotated[ProductRepository, Depends(get_product_repository)],
) -> Envelope[ProductResponse]:
    product = await repo.get_by_product_id(product_id)
    return Envelope(data=ProductResponse.from_product(product))


@router.patch("/{product_id}", response_model=Envelope[ProductResponse])
async def update_product(
    product_id: int,
    update: ProductUpdate,
    repo: Annotated[ProductRepository, Depends(get_product_repository)],
) -> Envelope[ProductResponse]:
    product = await repo.update(product_id, update.to_patch())
    logger.info("Product updated", product_id=product_id, fields=sorted(update.model_fields_set))
    return Envelope(data=ProductResponse.from_product(product), message="Product updated")
