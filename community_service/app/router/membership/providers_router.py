from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...schemas.membership.providers_schemas import (
    ProviderCreate, ProviderOut, ProviderRequest, ProvidersResponse
)
from ...crud.membership import providers_crud as crud
from shared.core.database import get_db
from shared.core.auth import validate_current_token
from shared.helpers.json_response_helper import not_found

router = APIRouter(
    prefix="/api/providers",
    tags=["providers"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/all", response_model=ProvidersResponse)
def get_providers(
        params: ProviderRequest = Depends(),
        db: Session = Depends(get_db)):
    return crud.get_providers(db, params)


@router.get("/{provider_id}", response_model=ProviderOut)
def get_provider(provider_id: int, db: Session = Depends(get_db)):
    provider = crud.get_provider_by_id(db, provider_id)
    if not provider:
        return not_found("Provider not found")
    return provider


@router.post("/", response_model=ProviderOut)
def create_provider(data: ProviderCreate, db: Session = Depends(get_db)):
    return crud.create_provider(db, data)
