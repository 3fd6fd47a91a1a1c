from fastapi import APIRouter, Depends

from ..dependencies import get_controller
from ..models import AppState, DashboardResponse, NavigateRequest
from ..services.viewer import dashboard_stats
from ..services.wizard import WizardController

router = APIRouter(tags=["Views"])


@router.get("/state", response_model=AppState)
async def get_state(controller: WizardController = Depends(get_controller)) -> AppState:
    """Return the full application state the client renders from."""
    return controller.state


@router.post("/views/navigate", response_model=AppState)
async def navigate(
    request: NavigateRequest,
    controller: WizardController = Depends(get_controller),
) -> AppState:
    """
    Switch to another screen.

    Every navigation increments `scrollResets`; the client scrolls to the top
    when it changes. Opening `view-report` requires a selected report.
    """
    return controller.navigate(request.view)


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(controller: WizardController = Depends(get_controller)) -> DashboardResponse:
    """Totals across all reports plus the reports themselves, most recent first."""
    reports = controller.state.reports
    return DashboardResponse(stats=dashboard_stats(reports), reports=reports)
