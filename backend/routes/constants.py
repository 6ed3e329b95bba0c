"""Constant catalog routes."""

from fastapi import APIRouter, HTTPException, Request, Response

from backend.models import ConstantInput, ConstantResponse

router = APIRouter()


@router.get("/constants", response_model=list[ConstantResponse])
async def list_constants(request: Request):
    constants = request.app.state.repository.list_constants()
    return [ConstantResponse.from_constant(c) for c in constants]


@router.get("/constants/{constant_id}", response_model=ConstantResponse)
async def get_constant(request: Request, constant_id: str):
    constant = request.app.state.repository.get_constant(constant_id)
    if not constant:
        raise HTTPException(status_code=404, detail="Constant not found")
    return ConstantResponse.from_constant(constant)


@router.post("/constants", response_model=ConstantResponse, status_code=201)
async def create_constant(request: Request, body: ConstantInput):
    constant = request.app.state.repository.create_constant(body.to_constant())
    return ConstantResponse.from_constant(constant)


@router.put("/constants/{constant_id}", response_model=ConstantResponse)
async def update_constant(request: Request, constant_id: str, body: ConstantInput):
    constant = request.app.state.repository.update_constant(constant_id, body.to_constant())
    if not constant:
        raise HTTPException(status_code=404, detail="Constant not found")
    return ConstantResponse.from_constant(constant)


@router.delete("/constants/{constant_id}", status_code=204)
async def delete_constant(request: Request, constant_id: str):
    if not request.app.state.repository.delete_constant(constant_id):
        raise HTTPException(status_code=404, detail="Constant not found")
    return Response(status_code=204)
