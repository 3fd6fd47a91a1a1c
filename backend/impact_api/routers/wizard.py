import base64
import binascii

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from ..dependencies import get_controller
from ..models import AppState, DraftDetailsUpdate, ImpactReport, LocationReading, MediaUpload
from ..services.wizard import WizardController

router = APIRouter(prefix="/wizard", tags=["Wizard"])


def _decode(request: MediaUpload) -> bytes:
    try:
        return base64.b64decode(request.data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid base64 data: {str(e)}")


@router.post("/new", response_model=AppState)
async def start_new_report(controller: WizardController = Depends(get_controller)) -> AppState:
    """Discard the current draft and open the receipt step."""
    return controller.start_new_report()


@router.post("/continue", response_model=AppState)
async def continue_step(controller: WizardController = Depends(get_controller)) -> AppState:
    return controller.continue_step()


@router.post("/back", response_model=AppState)
async def back_step(controller: WizardController = Depends(get_controller)) -> AppState:
    return controller.back_step()


@router.post("/receipts", response_model=AppState)
async def upload_receipt(
    file: UploadFile = File(...),
    controller: WizardController = Depends(get_controller),
) -> AppState:
    """
    Add a receipt from an image upload.

    The image is read by the model; if that fails a placeholder receipt with
    a zero trust score is added instead. The first receipt of a draft sets
    the draft currency.
    """
    content = await file.read()
    media_type = file.content_type or "image/jpeg"
    return await controller.add_receipt(content, media_type)


@router.post("/receipts/base64", response_model=AppState)
async def upload_receipt_base64(
    request: MediaUpload,
    controller: WizardController = Depends(get_controller),
) -> AppState:
    """Add a receipt from base64-encoded image data."""
    return await controller.add_receipt(_decode(request), request.media_type or "image/jpeg")


@router.post("/photos", response_model=AppState)
async def upload_photo(
    file: UploadFile = File(...),
    controller: WizardController = Depends(get_controller),
) -> AppState:
    """Add a distribution photo; the model writes its caption."""
    content = await file.read()
    media_type = file.content_type or "image/jpeg"
    return await controller.add_photo(content, media_type)


@router.post("/photos/base64", response_model=AppState)
async def upload_photo_base64(
    request: MediaUpload,
    controller: WizardController = Depends(get_controller),
) -> AppState:
    """Add a distribution photo from base64-encoded image data."""
    return await controller.add_photo(_decode(request), request.media_type or "image/jpeg")


@router.post("/voice-note/start", response_model=AppState)
async def start_voice_note(controller: WizardController = Depends(get_controller)) -> AppState:
    return controller.start_voice_capture()


@router.post("/voice-note/stop", response_model=AppState)
async def stop_voice_note(
    file: UploadFile | None = File(None),
    controller: WizardController = Depends(get_controller),
) -> AppState:
    """
    Finish the voice note with the recorded audio.

    The summary replaces any earlier one. A missing or empty recording is
    reported as a microphone failure.
    """
    content = await file.read() if file is not None else b""
    media_type = (file.content_type if file is not None else None) or "audio/mpeg"
    return await controller.finish_voice_capture(content, media_type)


@router.post("/location", response_model=AppState)
async def attach_location(
    reading: LocationReading,
    controller: WizardController = Depends(get_controller),
) -> AppState:
    """
    Attach the device position to the draft.

    Send `{"lat": ..., "lng": ...}` on success or `{"error": "..."}` when the
    device could not get a position.
    """
    return controller.attach_gps(reading)


@router.patch("/details", response_model=AppState)
async def update_details(
    update: DraftDetailsUpdate,
    controller: WizardController = Depends(get_controller),
) -> AppState:
    """Edit campaign name, location, beneficiary count, language or currency."""
    return controller.update_details(update)


@router.post("/finalize", response_model=ImpactReport)
async def finalize(controller: WizardController = Depends(get_controller)) -> ImpactReport:
    """
    Generate the story and create the report.

    Requires a campaign name and a location. The new report is listed first,
    selected, and the draft is cleared.
    """
    return await controller.finalize()
