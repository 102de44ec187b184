from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile, status

from ..auth.dependencies import require_user
from ..exceptions import NotFoundError
from ..storage import images
from . import service
from .bootstrap import initialize_user_data
from .models import (
    InitializeRequest,
    InitializeResponse,
    OnboardingRequest,
    OnboardingStatus,
    PreferencesUpdate,
    ProfileUpdate,
    WheelOption,
    WheelOptionRequest,
)

router = APIRouter(tags=["Profile"])


@router.post("/users/initialize", response_model=InitializeResponse)
def initialize(body: InitializeRequest | None = None, user: dict = Depends(require_user)):
    body = body or InitializeRequest()
    return initialize_user_data(
        user["uid"],
        email=user.get("email", ""),
        display_name=body.display_name or user.get("display_name"),
        picture=body.picture,
    )


# ── Profile ──────────────────────────────────────────────────────────────


@router.get("/profile")
def get_profile(user: dict = Depends(require_user)) -> dict:
    return service.get_profile(user["uid"])


@router.patch("/profile")
def update_profile(body: ProfileUpdate, user: dict = Depends(require_user)) -> dict:
    return service.update_profile(user["uid"], body.model_dump(exclude_none=True))


@router.post("/profile/picture")
def upload_profile_picture(
    file: UploadFile = File(...),
    user: dict = Depends(require_user),
) -> dict:
    config = images.DEFAULT_MEDIA_CONFIG
    stored = images.save_image(user["uid"], file.content_type, images.read_upload(file.file, config), config)
    return service.update_profile(user["uid"], {"profile_picture_url": stored.url})


# ── Preferences / onboarding ─────────────────────────────────────────────


@router.get("/preferences")
def get_preferences(user: dict = Depends(require_user)) -> dict:
    prefs = service.get_preferences(user["uid"])
    if prefs is None:
        raise NotFoundError("Preferences not found")
    return prefs


@router.patch("/preferences")
def update_preferences(body: PreferencesUpdate, user: dict = Depends(require_user)) -> dict:
    return service.update_preferences(user["uid"], body.model_dump(exclude_none=True))


@router.post("/onboarding")
def save_onboarding(body: OnboardingRequest, user: dict = Depends(require_user)) -> dict:
    return service.save_onboarding(user["uid"], body.model_dump())


@router.get("/onboarding/status", response_model=OnboardingStatus)
def onboarding_status(user: dict = Depends(require_user)) -> OnboardingStatus:
    return OnboardingStatus(completed=service.has_completed_onboarding(user["uid"]))


# ── Wheel ────────────────────────────────────────────────────────────────


@router.get("/wheel", response_model=list[WheelOption])
def list_wheel(user: dict = Depends(require_user)):
    return service.list_wheel_options(user["uid"])


@router.post("/wheel", response_model=WheelOption, status_code=status.HTTP_201_CREATED)
def add_to_wheel(body: WheelOptionRequest, user: dict = Depends(require_user)):
    return service.add_wheel_option(user["uid"], body.name)


@router.delete("/wheel/{option_id}")
def remove_from_wheel(option_id: str, user: dict = Depends(require_user)) -> dict:
    if not service.remove_wheel_option(user["uid"], option_id):
        raise NotFoundError("Wheel option not found", details={"id": option_id})
    return {"status": "ok", "removed": option_id}


@router.post("/wheel/spin", response_model=WheelOption)
def spin(user: dict = Depends(require_user)):
    return service.spin_wheel(user["uid"])
