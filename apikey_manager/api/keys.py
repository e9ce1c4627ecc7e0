import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..exceptions import GenerationError, KeyNotFoundError, StorageError, UnauthorizedError

logger = logging.getLogger(__name__)
router = APIRouter()


class GenerateRequestBody(BaseModel):
    organization_name: str


class GenerateResponse(BaseModel):
    api_id: str
    api_key: str


class ValidationResponse(BaseModel):
    valid: bool
    api_id: Optional[str] = None
    organization_name: Optional[str] = None
    message: Optional[str] = None


class UsageStatsResponse(BaseModel):
    total_requests: int
    last_used: Optional[datetime] = None
    unique_ip_count: int
    most_recent_ip: Optional[str] = None


class KeyWithStatsResponse(BaseModel):
    api_id: str
    organization_name: str
    expiration_date: Optional[datetime] = None
    is_expired: bool
    usage_stats: UsageStatsResponse


class ListResponse(BaseModel):
    api_keys: List[KeyWithStatsResponse]
    total: int


class RevokeResponse(BaseModel):
    success: bool
    message: str
    api_id: Optional[str] = None


def _unauthorized(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=ValidationResponse(valid=False, message=message).model_dump(exclude_none=True),
        headers={"WWW-Authenticate": "Bearer"},
    )


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@router.post("", response_model=GenerateResponse)
async def generate_key(request: Request, body: GenerateRequestBody):
    generator = request.app.state.key_generator

    try:
        key_id, credential = generator.generate(body.organization_name)
    except (GenerationError, StorageError) as e:
        logger.error("Key generation failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    return GenerateResponse(api_id=key_id, api_key=credential)


@router.post(
    "/validate",
    response_model=ValidationResponse,
    response_model_exclude_none=True,
)
async def validate_key(request: Request, authorization: Optional[str] = Header(default=None)):
    validator = request.app.state.key_validator

    if not authorization:
        return _unauthorized("Missing Authorization header")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return _unauthorized("Invalid Authorization header format")

    try:
        record = validator.validate(parts[1], _client_ip(request))
    except UnauthorizedError:
        return _unauthorized("Invalid or expired API key")

    return ValidationResponse(
        valid=True,
        api_id=record.key_id,
        organization_name=record.organization,
        message="API key is valid",
    )


@router.get("", response_model=ListResponse)
async def list_keys(request: Request):
    lister = request.app.state.key_lister

    listing = lister.list_keys(datetime.now(timezone.utc))

    return ListResponse(
        api_keys=[
            KeyWithStatsResponse(
                api_id=entry.key_id,
                organization_name=entry.organization,
                expiration_date=entry.expires_at,
                is_expired=entry.is_expired,
                usage_stats=UsageStatsResponse(
                    total_requests=entry.usage_stats.total_requests,
                    last_used=entry.usage_stats.last_used,
                    unique_ip_count=entry.usage_stats.unique_ip_count,
                    most_recent_ip=entry.usage_stats.most_recent_ip,
                ),
            )
            for entry in listing.keys
        ],
        total=listing.total,
    )


@router.delete(
    "/{key_id}",
    response_model=RevokeResponse,
    response_model_exclude_none=True,
)
async def revoke_key(request: Request, key_id: str):
    revoker = request.app.state.key_revoker

    try:
        revoker.revoke(key_id)
    except KeyNotFoundError:
        logger.warning("Revocation requested for unknown key %s", key_id)
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=RevokeResponse(
                success=False,
                message="API key not found",
                api_id=key_id,
            ).model_dump(),
        )

    return RevokeResponse(
        success=True,
        message="API key successfully expired",
        api_id=key_id,
    )
