from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from courseconnect.apis.common import http_error
from courseconnect.apis.deps import CurrentUser
from courseconnect.core.cache import profile_cache, profile_key
from courseconnect.core.config import settings
from courseconnect.core.db.base import get_session
from courseconnect.core.db.schemas.auth import User
from courseconnect.core.db.schemas.user_profile import UserProfile
from courseconnect.core.db_services import (
    DEFAULT_NOTIFICATION_SETTINGS,
    UserProfileService,
    is_offline_error,
)
from courseconnect.core.logging import get_logger
from courseconnect.modules.documents import FileKind, validate_upload
from courseconnect.modules.media import compress_image, media_store
from .schemas import (
    NotificationSettings,
    PhotoUploadResponse,
    UserProfileRead,
    UserProfileUpdate,
)

logger = get_logger(__name__)

router = APIRouter()

BASE = f"{settings.api_root}/profile"


def _to_read(profile: UserProfile, user: User) -> UserProfileRead:
    read = UserProfileRead.model_validate(profile)
    read.email = str(user.email)
    read.notification_settings = {
        **DEFAULT_NOTIFICATION_SETTINGS,
        **(profile.notification_settings or {}),
    }
    return read


async def _shadow(read: UserProfileRead) -> None:
    await profile_cache.set(
        profile_key(read.user_id), read.model_dump(by_alias=True, mode="json")
    )


async def _write_failed(session: AsyncSession, user: User, exc: Exception) -> None:
    """Turn an unreachable store into a 503; other errors are left to the caller."""
    if not is_offline_error(exc):
        return
    await session.rollback()
    logger.warning(
        f"Profile write failed, store unavailable: {exc}",
        extra={"user_id": user.id},
    )
    raise HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Profile service is unavailable",
    ) from exc


async def _offline_fallback(
    session: AsyncSession, user: User, exc: Exception
) -> UserProfileRead:
    """Serve the cached copy when the store looks unreachable, else re-raise."""
    if not is_offline_error(exc):
        raise exc
    await session.rollback()
    cached = await profile_cache.get(profile_key(user.id))
    logger.warning(
        f"Profile store unavailable ({exc}); cached copy {'found' if cached else 'missing'}",
        extra={"user_id": user.id},
    )
    if not cached:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Profile service is unavailable",
        ) from exc
    read = UserProfileRead.model_validate(cached)
    read.offline = True
    return read


@router.get(BASE, response_model=UserProfileRead, tags=["user_profile"])
async def get_profile(
    user: CurrentUser,
    session: AsyncSession = Depends(get_session),
) -> UserProfileRead:
    """Get user profile, auto-create if doesn't exist"""
    try:
        profile = await UserProfileService(session).get_or_create_profile(user.id)
    except Exception as e:
        return await _offline_fallback(session, user, e)
    read = _to_read(profile, user)
    await _shadow(read)
    return read


@router.put(BASE, response_model=UserProfileRead, tags=["user_profile"])
async def update_profile(
    profile_data: UserProfileUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_session),
) -> UserProfileRead:
    """Update user profile, auto-create if doesn't exist"""
    update_data = profile_data.model_dump(exclude_unset=True)
    try:
        profile = await UserProfileService(session).update_profile(user.id, update_data)
    except Exception as e:
        await _write_failed(session, user, e)
        raise
    read = _to_read(profile, user)
    await _shadow(read)
    return read


@router.get(
    f"{BASE}/notifications", response_model=NotificationSettings, tags=["user_profile"]
)
async def get_notifications(
    user: CurrentUser,
    session: AsyncSession = Depends(get_session),
) -> NotificationSettings:
    read = await get_profile(user, session)
    return NotificationSettings(settings=read.notification_settings)


@router.put(
    f"{BASE}/notifications", response_model=NotificationSettings, tags=["user_profile"]
)
async def update_notifications(
    req: NotificationSettings,
    user: CurrentUser,
    session: AsyncSession = Depends(get_session),
) -> NotificationSettings:
    try:
        profile = await UserProfileService(session).update_notifications(
            user.id, req.settings
        )
    except Exception as e:
        await _write_failed(session, user, e)
        raise
    read = _to_read(profile, user)
    await _shadow(read)
    return NotificationSettings(settings=read.notification_settings)


@router.post(
    f"{BASE}/photo", response_model=PhotoUploadResponse, tags=["user_profile"]
)
async def upload_photo(
    user: CurrentUser,
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_session),
) -> PhotoUploadResponse:
    data = await file.read()
    try:
        validate_upload(
            file.filename or "", file.content_type, len(data), allowed=(FileKind.IMAGE,)
        )
        compressed = compress_image(data)
    except ValueError as e:
        raise http_error(e) from e

    stored = await media_store.upload_with_retry(user.id, compressed)
    try:
        profile = await UserProfileService(session).update_profile(
            user.id, {"photo_url": stored.url}
        )
    except Exception as e:
        await _write_failed(session, user, e)
        raise
    await _shadow(_to_read(profile, user))
    return PhotoUploadResponse(
        photo_url=stored.url,
        source=stored.source,
        size=stored.size,
        attempts=stored.attempts,
    )
