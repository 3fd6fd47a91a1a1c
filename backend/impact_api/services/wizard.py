import base64
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from . import transitions
from .ai_gateway import (
    caption_photo,
    extract_receipt_data,
    generate_impact_story,
    summarize_voice_note,
    translate_story,
)
from ..errors import InvalidTransitionError, MediaCaptureError, WizardBusyError
from ..models import (
    AppState,
    Coordinates,
    DraftDetailsUpdate,
    ImpactReport,
    LocationReading,
    ViewState,
)


logger = logging.getLogger(__name__)

MICROPHONE_ALERT = "Could not access microphone."
GPS_ALERT = "Could not retrieve GPS location."


class WizardController:
    """
    Owns the single AppState and sequences model calls into it.

    Only one upload, capture or finalize call may be in flight; a second one
    is rejected with WizardBusyError while the processing flag is set. State
    is re-read after every awaited call, so each change applies on top of the
    latest state.
    """

    def __init__(self, state: Optional[AppState] = None):
        self.state = state if state is not None else transitions.initial_state()

    @asynccontextmanager
    async def _processing(self):
        self.state = transitions.begin_processing(self.state)
        try:
            yield
        finally:
            self.state = transitions.end_processing(self.state)

    # --- Navigation ---

    def navigate(self, view: ViewState) -> AppState:
        self.state = transitions.navigate(self.state, view)
        return self.state

    def start_new_report(self) -> AppState:
        self.state = transitions.start_new_report(self.state)
        return self.state

    def continue_step(self) -> AppState:
        self.state = transitions.continue_step(self.state)
        return self.state

    def back_step(self) -> AppState:
        self.state = transitions.back_step(self.state)
        return self.state

    # --- Step 1 and 2: uploads ---

    async def add_receipt(self, image: bytes, media_type: str = "image/jpeg") -> AppState:
        async with self._processing():
            receipt = await extract_receipt_data(image, media_type)
            self.state = transitions.add_receipt(self.state, receipt)

        logger.info(
            "Added receipt %d from %s (draft currency %s)",
            len(self.state.draft.receipts), receipt.store_name, self.state.draft.currency,
        )
        return self.state

    async def add_photo(self, image: bytes, media_type: str = "image/jpeg") -> AppState:
        async with self._processing():
            caption = await caption_photo(image, media_type)
            image_base64 = base64.b64encode(image).decode("utf-8")
            self.state = transitions.add_photo(self.state, caption, image_base64, media_type=media_type)

        logger.info("Added photo %d", len(self.state.draft.photos))
        return self.state

    # --- Step 3: details ---

    def start_voice_capture(self) -> AppState:
        if self.state.processing:
            raise WizardBusyError()
        self.state = transitions.start_recording(self.state)
        return self.state

    async def finish_voice_capture(self, audio: bytes, media_type: str = "audio/mpeg") -> AppState:
        """
        Stop recording and replace the transcript with a summary of the audio.

        Raises:
            MediaCaptureError: If no capture was running or the recording is empty
        """
        was_recording = self.state.recording
        self.state = transitions.stop_recording(self.state)
        if not was_recording or not audio:
            logger.warning("Voice capture finished without audio (recording=%s)", was_recording)
            raise MediaCaptureError(MICROPHONE_ALERT)

        async with self._processing():
            summary = await summarize_voice_note(audio, media_type)
            self.state = transitions.set_voice_note(self.state, summary)
        return self.state

    def attach_gps(self, reading: LocationReading) -> AppState:
        """
        Store a device position on the draft.

        Raises:
            MediaCaptureError: If the device reported an error or no position
        """
        if reading.error or reading.lat is None or reading.lng is None:
            logger.warning("Geolocation failed: %s", reading.error or "no coordinates")
            raise MediaCaptureError(GPS_ALERT)

        self.state = transitions.attach_coordinates(
            self.state, Coordinates(lat=reading.lat, lng=reading.lng)
        )
        return self.state

    def update_details(self, update: DraftDetailsUpdate) -> AppState:
        self.state = transitions.update_details(self.state, update)
        return self.state

    async def finalize(self) -> ImpactReport:
        """
        Turn the draft into a report and open it.

        Raises:
            FinalizationBlockedError: If campaign name or location is empty
        """
        transitions.check_can_finalize(self.state.draft)

        async with self._processing():
            draft = self.state.draft
            story = await generate_impact_story(
                draft.campaign_name,
                draft.location,
                draft.beneficiaries_count,
                draft.receipts,
                [photo.caption for photo in draft.photos],
                draft.voice_note_text,
                draft.language,
            )
            report = transitions.build_report(draft, story, uuid.uuid4().hex)
            self.state = transitions.add_report(self.state, report)

        logger.info(
            "Finalized report %s for %s: %d receipts, %d photos, %s %s",
            report.id, report.campaign_name, len(report.receipts),
            len(report.photos), report.currency, report.total_spend,
        )
        return report

    # --- Report viewer ---

    def select_report(self, report_id: str) -> AppState:
        self.state = transitions.select_report(self.state, report_id)
        return self.state

    async def translate_selected(self, language: str) -> ImpactReport:
        """Translate the selected report's story, even into its current language."""
        report = self.state.selected_report
        if report is None:
            raise InvalidTransitionError("No report selected")

        async with self._processing():
            story = await translate_story(report.story, language)
            self.state = transitions.apply_translation(self.state, report.id, story, language)

        logger.info("Translated report %s to %s", report.id, language)
        return transitions.find_report(self.state, report.id)
