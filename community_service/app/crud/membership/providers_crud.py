import logging
from typing import Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.helpers.json_response_helper import not_found
from shared.helpers.phone_helper import normalize_phone
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import AccountType, JoinRequestStatus, ProfileType
from ...models.membership.providers import Provider
from ...models.membership.join_requests import JoinRequest
from ...schemas.membership.providers_schemas import (
    JoinRequestOut, OrganizationCreate, ProviderCreate, ProviderOut, ProviderRequest
)

logger = logging.getLogger(__name__)


def get_provider_by_id(db: Session, provider_id: int) -> Optional[Provider]:
    return db.query(Provider).filter(Provider.id == provider_id).first()


def get_provider_by_phone(db: Session, phone: str) -> Optional[Provider]:
    return (
        db.query(Provider)
        .filter(Provider.phone == normalize_phone(phone))
        .order_by(Provider.id)
        .first()
    )


def get_organization(db: Session, organization_id: int) -> Provider:
    organization = get_provider_by_id(db, organization_id)
    if not organization or not organization.is_organization:
        return not_found("Organization not found",
                         AppStatusCode.ORGANIZATION_NOT_FOUND)
    return organization


def get_providers(db: Session, params: ProviderRequest):
    query = db.query(Provider)

    if params.account_type:
        query = query.filter(Provider.account_type == params.account_type)

    if params.search:
        search_term = f"%{params.search}%"
        query = query.filter(or_(Provider.name.ilike(search_term),
                                 Provider.service.ilike(search_term),
                                 Provider.location.ilike(search_term)))

    total = query.with_entities(func.count(Provider.id)).scalar()
    providers = query.order_by(Provider.id).offset(
        params.skip).limit(params.limit).all()

    return {
        "providers": [ProviderOut.model_validate(p) for p in providers],
        "total": total,
    }


def _provider_fields(data: ProviderCreate) -> dict:
    fields = data.model_dump(exclude={"leaders"})
    fields["phone"] = normalize_phone(data.phone)
    fields["whatsapp"] = normalize_phone(data.whatsapp) or fields["phone"]
    return fields


def create_provider(db: Session, data: ProviderCreate) -> Provider:
    db_provider = Provider(**_provider_fields(data))
    db.add(db_provider)
    db.commit()
    db.refresh(db_provider)
    logger.info("Created provider %s", db_provider.id)
    return db_provider


def create_organization(db: Session, data: OrganizationCreate) -> Provider:
    db_org = Provider(
        **_provider_fields(data),
        account_type=AccountType.organization,
        profile_type=ProfileType.group,
        chairperson_phone=normalize_phone(data.leaders.chairperson),
        secretary_phone=normalize_phone(data.leaders.secretary),
        treasurer_phone=normalize_phone(data.leaders.treasurer),
    )
    db.add(db_org)
    db.commit()
    db.refresh(db_org)
    logger.info("Created organization %s (%s)", db_org.id, db_org.name)
    return db_org


def get_all_pending_requests(db: Session):
    """Admin dashboard: pending join requests across every organization."""
    requests = (
        db.query(JoinRequest)
        .filter(JoinRequest.status == JoinRequestStatus.pending)
        .order_by(JoinRequest.id)
        .all()
    )
    return {
        "join_requests": [JoinRequestOut.model_validate(r) for r in requests],
        "total": len(requests),
    }
