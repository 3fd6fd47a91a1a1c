from fastapi import APIRouter, Depends

from ..dependencies import get_controller
from ..models import AppState, ImpactReport, ReportView, TranslateRequest
from ..services.transitions import find_report
from ..services.viewer import render_report
from ..services.wizard import WizardController

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("", response_model=list[ImpactReport])
async def list_reports(controller: WizardController = Depends(get_controller)) -> list[ImpactReport]:
    """All reports, most recent first."""
    return controller.state.reports


@router.post("/selected/translate", response_model=ReportView)
async def translate_selected_report(
    request: TranslateRequest,
    controller: WizardController = Depends(get_controller),
) -> ReportView:
    """
    Translate the story of the selected report.

    Only the story and language change. If the model call fails the story
    is kept as it was and the language tag is still updated.
    """
    report = await controller.translate_selected(request.language)
    return render_report(report)


@router.get("/{report_id}", response_model=ReportView)
async def get_report(
    report_id: str,
    controller: WizardController = Depends(get_controller),
) -> ReportView:
    return render_report(find_report(controller.state, report_id))


@router.post("/{report_id}/select", response_model=AppState)
async def select_report(
    report_id: str,
    controller: WizardController = Depends(get_controller),
) -> AppState:
    """Select a report from the dashboard and open the report view."""
    return controller.select_report(report_id)
