from functools import lru_cache

from .config import get_settings
from .services.transitions import initial_state
from .services.wizard import WizardController


@lru_cache
def get_controller() -> WizardController:
    """The process-wide owner of the report and wizard state."""
    settings = get_settings()
    return WizardController(initial_state(seed_sample_report=settings.seed_sample_report))
