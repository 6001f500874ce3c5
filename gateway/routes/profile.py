# profile.py
# Profile mutation endpoints for the Endless Forge API gateway

# Both endpoints draw from the caller's daily `profileChange` quota before
# touching Pinata or Firebase. Quota is consumed even when the provider
# call fails afterwards.
# A body uid naming someone else is refused before the quota is touched.

# @see: gateway/rate_limit.py - enforce_limit dependency
# @see: gateway/providers/pinata.py - IPFS pinning client

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from firebase_admin.exceptions import FirebaseError

from gateway import config
from gateway.auth import get_current_uid
from gateway.logging_config import get_logger
from gateway.models import (
    ActionKind,
    ProfileNameResponse,
    ProfilePictureResponse,
    QuotaDecision,
    UpdateProfileNameInput,
)
from gateway.providers import PinataClient, ProviderError, get_pinata_client
from gateway.rate_limit import enforce_limit
from gateway.user_store import DocumentNotFound, StoreError, UserStore

logger = get_logger("routes.profile")

router = APIRouter(tags=["profile"])


def get_store() -> UserStore:
    return config.get_user_store()


def get_identity():
    return config.get_auth()


def own_profile_name(
    payload: UpdateProfileNameInput,
    uid: str = Depends(get_current_uid),
) -> UpdateProfileNameInput:
    """Reject a body `uid` naming another user before any quota is drawn."""
    if payload.uid and payload.uid != uid:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot update another user's profile",
        )
    return payload


@router.post("/upload-profile-pic", response_model=ProfilePictureResponse)
async def upload_profile_pic(
    profilePic: Optional[UploadFile] = File(None),
    _quota: QuotaDecision = Depends(enforce_limit(ActionKind.PROFILE_CHANGE)),
    pinata: PinataClient = Depends(get_pinata_client),
):
    """Pin the uploaded picture on IPFS and return its gateway URL."""
    if profilePic is None or not profilePic.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded.")

    try:
        cid = await run_in_threadpool(
            pinata.pin_file,
            profilePic.filename,
            profilePic.file,
            profilePic.content_type,
        )
    except ProviderError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Error uploading image to Pinata.",
        )
    finally:
        await profilePic.close()

    return ProfilePictureResponse(imageUrl=pinata.gateway_url(cid))


@router.post("/update-profile-name", response_model=ProfileNameResponse)
async def update_profile_name(
    payload: UpdateProfileNameInput = Depends(own_profile_name),
    uid: str = Depends(get_current_uid),
    _quota: QuotaDecision = Depends(enforce_limit(ActionKind.PROFILE_CHANGE)),
    store: UserStore = Depends(get_store),
    identity=Depends(get_identity),
):
    """Set the caller's display name in Firebase Auth and Firestore."""
    new_name = (payload.newName or "").strip()
    if not new_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing uid or newName",
        )

    try:
        await run_in_threadpool(identity.update_user, uid, display_name=new_name)
        await store.update(
            uid,
            {
                "displayName": new_name,
                "profile.name": new_name,
                "api.lastProfileNameUpdate": datetime.now(timezone.utc).isoformat(),
            },
        )
    except (DocumentNotFound, StoreError, FirebaseError, identity.UserNotFoundError) as exc:
        logger.error(f"Error updating profile name for {uid}: {exc}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update profile name",
        )

    logger.info(f"Updated display name for UID {uid} -> {new_name}")
    return ProfileNameResponse(
        success=True,
        message="Profile name updated successfully",
        newName=new_name,
    )
