from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from dependencies import get_suppliers
from errors import NotFound, ValidationFailed
from repositories import SupplierRepository
from schemas import Supplier
from validators import validate_supplier

router = APIRouter(prefix="/api/suppliers", tags=["suppliers"])


@router.get("", response_model=List[Supplier], response_model_exclude_unset=True)
async def list_suppliers(suppliers: SupplierRepository = Depends(get_suppliers)):
    return await suppliers.find_all()


@router.get("/{supplier_id}", response_model=Supplier, response_model_exclude_unset=True)
async def get_supplier(supplier_id: str, suppliers: SupplierRepository = Depends(get_suppliers)):
    supplier = await suppliers.find_by_id(supplier_id)
    if supplier is None:
        raise NotFound("supplier")
    return supplier


@router.post("", status_code=201, response_model=Supplier, response_model_exclude_unset=True)
async def create_supplier(payload: Dict[str, Any] = Body(...), suppliers: SupplierRepository = Depends(get_suppliers)):
    errors = validate_supplier(payload)
    if errors:
        raise ValidationFailed(errors)
    return await suppliers.create(payload)


@router.put("/{supplier_id}", response_model=Supplier, response_model_exclude_unset=True)
async def update_supplier(
    supplier_id: str,
    payload: Dict[str, Any] = Body(...),
    suppliers: SupplierRepository = Depends(get_suppliers),
):
    errors = validate_supplier(payload)
    if errors:
        raise ValidationFailed(errors)
    return await suppliers.update(supplier_id, payload)


@router.delete("/{supplier_id}")
async def delete_supplier(supplier_id: str, suppliers: SupplierRepository = Depends(get_suppliers)):
    await suppliers.delete(supplier_id)
    return {"message": "Supplier deleted successfully"}
