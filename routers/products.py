from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from dependencies import get_products
from errors import NotFound, ValidationFailed
from repositories import ProductRepository
from schemas import Product
from validators import validate_product

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=List[Product], response_model_exclude_unset=True)
async def list_products(products: ProductRepository = Depends(get_products)):
    return await products.find_all()


@router.get("/supplier/{supplier_id}", response_model=List[Product], response_model_exclude_unset=True)
async def list_products_by_supplier(supplier_id: str, products: ProductRepository = Depends(get_products)):
    return await products.find_by_supplier(supplier_id)


@router.get("/{product_id}", response_model=Product, response_model_exclude_unset=True)
async def get_product(product_id: str, products: ProductRepository = Depends(get_products)):
    product = await products.find_by_id(product_id)
    if product is None:
        raise NotFound("product")
    return product


@router.post("", status_code=201, response_model=Product, response_model_exclude_unset=True)
async def create_product(payload: Dict[str, Any] = Body(...), products: ProductRepository = Depends(get_products)):
    errors = validate_product(payload)
    if errors:
        raise ValidationFailed(errors)
    return await products.create(payload)


@router.put("/{product_id}", response_model=Product, response_model_exclude_unset=True)
async def update_product(
    product_id: str,
    payload: Dict[str, Any] = Body(...),
    products: ProductRepository = Depends(get_products),
):
    errors = validate_product(payload)
    if errors:
        raise ValidationFailed(errors)
    return await products.update(product_id, payload)


@router.delete("/{product_id}")
async def delete_product(product_id: str, products: ProductRepository = Depends(get_products)):
    await products.delete(product_id)
    return {"message": "Product deleted successfully"}
