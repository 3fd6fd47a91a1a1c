"""
Pure state transitions for the report wizard and view router.

Every function takes the current AppState (plus inputs) and returns a new
AppState. Nothing here performs I/O or mutates its arguments, so the whole
flow can be exercised without a server or a model.
"""

from datetime import datetime, timezone
from typing import Optional

from ..errors import (
    FinalizationBlockedError,
    InvalidTransitionError,
    ReportNotFoundError,
    WizardBusyError,
)
from ..models import (
    AppState,
    Coordinates,
    DistributionPhoto,
    Draft,
    DraftDetailsUpdate,
    ImpactReport,
    ReceiptData,
    ReceiptItem,
    ReportStatus,
    ViewState,
    WIZARD_VIEWS,
)


GPS_VERIFIED_SUFFIX = " (GPS Verified)"


SAMPLE_REPORT = ImpactReport(
    id="1",
    campaign_name="Sumatera Disaster Relief 2025",
    location="West Sumatera",
    beneficiaries_count=500,
    date="2025-01-15",
    total_spend=15000000,
    currency="IDR",
    receipts=[
        ReceiptData(
            store_name="Padang Supplies Depot",
            date="2025-01-14",
            total_amount=5000000,
            currency="IDR",
            trust_score=98,
            items=[ReceiptItem(name="Rice Bags (20kg)", quantity=20, price=250000)],
        ),
    ],
    photos=[
        DistributionPhoto(
            base64="",
            caption="Volunteers distributing rice bags to families in the affected village.",
            timestamp="2025-01-15T10:30:00Z",
        ),
        DistributionPhoto(
            base64="",
            caption="Community gathering at the distribution point receiving clean water and supplies.",
            timestamp="2025-01-15T11:15:00Z",
        ),
    ],
    story=(
        "We successfully distributed emergency supplies including blankets, clean water, "
        "and food kits to 500 survivors of the recent floods. The community expressed immense "
        "gratitude for the swift response. Volunteers worked through the night to ensure every "
        "family received a package."
    ),
    status=ReportStatus.PUBLISHED,
    language="English",
)


def initial_state(seed_sample_report: bool = True) -> AppState:
    reports = [SAMPLE_REPORT] if seed_sample_report else []
    return AppState(reports=reports)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# --- View router ---

def navigate(state: AppState, view: ViewState) -> AppState:
    """
    Switch the current view.

    Navigation always resets the scroll position, even when the view does not
    change. Wizard views also move the wizard to the matching step.

    Raises:
        InvalidTransitionError: If view-report is requested with no report selected
    """
    if view == ViewState.VIEW_REPORT and state.selected_report is None:
        raise InvalidTransitionError("No report selected")

    update = {"view": view, "scroll_resets": state.scroll_resets + 1}
    if view in WIZARD_VIEWS:
        update["wizard_step"] = WIZARD_VIEWS.index(view) + 1
    return state.model_copy(update=update)


def continue_step(state: AppState) -> AppState:
    if state.view not in WIZARD_VIEWS or state.wizard_step >= len(WIZARD_VIEWS):
        raise InvalidTransitionError(f"Cannot continue from {state.view.value}")
    return navigate(state, WIZARD_VIEWS[state.wizard_step])


def back_step(state: AppState) -> AppState:
    if state.view not in WIZARD_VIEWS or state.wizard_step <= 1:
        raise InvalidTransitionError(f"Cannot go back from {state.view.value}")
    return navigate(state, WIZARD_VIEWS[state.wizard_step - 2])


# --- Processing flag ---

def begin_processing(state: AppState) -> AppState:
    if state.processing:
        raise WizardBusyError()
    return state.model_copy(update={"processing": True})


def end_processing(state: AppState) -> AppState:
    return state.model_copy(update={"processing": False})


# --- Draft ---

def _with_draft(state: AppState, **changes) -> AppState:
    return state.model_copy(update={"draft": state.draft.model_copy(update=changes)})


def reset_draft(state: AppState) -> AppState:
    return state.model_copy(update={"draft": Draft(), "wizard_step": 1, "recording": False})


def start_new_report(state: AppState) -> AppState:
    return navigate(reset_draft(state), ViewState.CREATE_RECEIPT)


def add_receipt(state: AppState, receipt: ReceiptData) -> AppState:
    """Append a receipt. The first receipt of a draft sets the draft currency."""
    draft = state.draft
    currency = receipt.currency if not draft.receipts else draft.currency
    return _with_draft(state, receipts=[*draft.receipts, receipt], currency=currency)


def add_photo(
    state: AppState,
    caption: str,
    image_base64: str,
    taken_at: Optional[datetime] = None,
    media_type: str = "image/jpeg",
) -> AppState:
    photo = DistributionPhoto(
        base64=image_base64,
        media_type=media_type,
        caption=caption,
        timestamp=(taken_at or utc_now()).isoformat(),
    )
    return _with_draft(state, photos=[*state.draft.photos, photo])


def start_recording(state: AppState) -> AppState:
    return state.model_copy(update={"recording": True})


def stop_recording(state: AppState) -> AppState:
    return state.model_copy(update={"recording": False})


def set_voice_note(state: AppState, text: str) -> AppState:
    # A new recording replaces the previous summary
    return _with_draft(state, voice_note_text=text)


def attach_coordinates(state: AppState, coordinates: Coordinates) -> AppState:
    return _with_draft(
        state,
        coordinates=coordinates,
        location=f"{state.draft.location}{GPS_VERIFIED_SUFFIX}",
    )


def update_details(state: AppState, update: DraftDetailsUpdate) -> AppState:
    changes = update.model_dump(exclude_none=True)
    if not changes:
        return state
    return _with_draft(state, **changes)


# --- Finalization ---

def check_can_finalize(draft: Draft) -> None:
    if not draft.can_finalize:
        raise FinalizationBlockedError("Campaign name and location are required")


def build_report(draft: Draft, story: str, report_id: str, created_at: Optional[datetime] = None) -> ImpactReport:
    """Materialize a draft into a report. Total spend is fixed here."""
    return ImpactReport(
        id=report_id,
        campaign_name=draft.campaign_name,
        location=draft.location,
        coordinates=draft.coordinates,
        beneficiaries_count=draft.beneficiaries_count,
        date=(created_at or utc_now()).date().isoformat(),
        total_spend=sum(receipt.total_amount for receipt in draft.receipts),
        currency=draft.currency,
        receipts=list(draft.receipts),
        photos=list(draft.photos),
        story=story,
        status=ReportStatus.DRAFT,
        language=draft.language,
    )


def add_report(state: AppState, report: ImpactReport) -> AppState:
    """Prepend a finalized report, select it, clear the draft and open it."""
    if any(existing.id == report.id for existing in state.reports):
        raise InvalidTransitionError(f"Report id already used: {report.id}")

    state = state.model_copy(update={
        "reports": [report, *state.reports],
        "selected_report_id": report.id,
    })
    return navigate(reset_draft(state), ViewState.VIEW_REPORT)


# --- Report viewer ---

def find_report(state: AppState, report_id: str) -> ImpactReport:
    for report in state.reports:
        if report.id == report_id:
            return report
    raise ReportNotFoundError(report_id)


def select_report(state: AppState, report_id: str) -> AppState:
    find_report(state, report_id)
    state = state.model_copy(update={"selected_report_id": report_id})
    return navigate(state, ViewState.VIEW_REPORT)


def apply_translation(state: AppState, report_id: str, story: str, language: str) -> AppState:
    """Replace only the story and language of one report."""
    find_report(state, report_id)
    reports = [
        report.model_copy(update={"story": story, "language": language}) if report.id == report_id else report
        for report in state.reports
    ]
    return state.model_copy(update={"reports": reports})
