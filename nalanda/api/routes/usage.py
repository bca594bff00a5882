"""
Reading quota API endpoints.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from nalanda.core.security import get_token_data
from nalanda.db.session import get_db
from nalanda.schemas.token import TokenData
from nalanda.schemas.usage import UsageSummary
from nalanda.services.usage_service import UsageService

router = APIRouter()


@router.get(
    "/me",
    response_model=UsageSummary,
    status_code=status.HTTP_200_OK,
    summary="Get the caller's reading quota"
)
async def get_my_usage(db: Session = Depends(get_db), caller: TokenData = Depends(get_token_data)):
    """
    Current daily and monthly chunk reads against the free reader limits.
    """
    return UsageService(db).get_usage_summary(caller.user_id)
