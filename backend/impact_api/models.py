from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


SUPPORTED_LANGUAGES = [
    "English", "Indonesian", "Arabic", "Spanish", "French",
    "German", "Turkish", "Urdu", "Hindi", "Bengali",
    "Chinese", "Japanese", "Russian", "Swahili", "Portuguese",
]

CURRENCIES = ["USD", "EUR", "GBP", "IDR", "SAR", "AED", "TRY", "MYR"]

DEFAULT_LANGUAGE = "English"
DEFAULT_CURRENCY = "USD"


def _check_language(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language: {value}")
    return value


def _as_number(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Expected a number, got {value!r}")


def _check_currency(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in CURRENCIES:
        raise ValueError(f"Unsupported currency: {value}")
    return value


class CamelModel(BaseModel):
    """Base model serialized with the camelCase field names the frontend uses."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReportStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class ViewState(str, Enum):
    """Closed set of screens the client can show."""
    LANDING = "landing"
    DASHBOARD = "dashboard"
    CREATE_RECEIPT = "create-receipt"
    CREATE_PHOTOS = "create-photos"
    CREATE_SUMMARY = "create-summary"
    VIEW_REPORT = "view-report"
    DONORS = "donors"
    HOW_IT_WORKS = "how-it-works"
    FEATURES = "features"


# Wizard screens in step order
WIZARD_VIEWS = [ViewState.CREATE_RECEIPT, ViewState.CREATE_PHOTOS, ViewState.CREATE_SUMMARY]


class ReceiptItem(CamelModel):
    """A single purchased line on a receipt."""
    name: str = ""
    quantity: int = 1
    price: float = 0

    @field_validator("name", mode="before")
    @classmethod
    def blank_name(cls, value):
        return "" if value is None else value

    @field_validator("quantity", mode="before")
    @classmethod
    def round_quantity(cls, value):
        if value is None:
            return 1
        return max(0, round(_as_number(value)))

    @field_validator("price", mode="before")
    @classmethod
    def missing_price(cls, value):
        return 0 if value is None else value

    @property
    def line_total(self) -> float:
        """Quantity times unit price. Derived for display only."""
        return self.quantity * self.price


class ReceiptData(CamelModel):
    """Structured data extracted from one receipt image."""
    store_name: str
    date: Optional[str] = None
    total_amount: float
    currency: str
    items: list[ReceiptItem] = []
    trust_score: int
    fraud_notes: Optional[str] = None
    original_image: Optional[str] = None

    @field_validator("trust_score", mode="before")
    @classmethod
    def clamp_trust_score(cls, value):
        return min(100, max(0, round(_as_number(value))))


class DistributionPhoto(CamelModel):
    """A captioned photo of the distribution event."""
    base64: str
    caption: str
    timestamp: str
    media_type: str = "image/jpeg"


class Coordinates(CamelModel):
    lat: float
    lng: float


class ImpactReport(CamelModel):
    """A finalized report. Only story and language change after creation."""
    id: str
    campaign_name: str
    location: str
    coordinates: Optional[Coordinates] = None
    beneficiaries_count: int = 0
    date: str
    total_spend: float
    currency: str
    receipts: list[ReceiptData] = []
    photos: list[DistributionPhoto] = []
    story: str
    status: ReportStatus = ReportStatus.DRAFT
    language: str = DEFAULT_LANGUAGE


class Draft(CamelModel):
    """Working state of the report wizard."""
    campaign_name: str = ""
    location: str = ""
    coordinates: Optional[Coordinates] = None
    beneficiaries_count: int = 0
    receipts: list[ReceiptData] = []
    photos: list[DistributionPhoto] = []
    language: str = DEFAULT_LANGUAGE
    currency: str = DEFAULT_CURRENCY
    voice_note_text: str = ""

    @property
    def can_finalize(self) -> bool:
        return bool(self.campaign_name) and bool(self.location)


class AppState(CamelModel):
    """Everything the service remembers. Replaced wholesale on every change."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    view: ViewState = ViewState.LANDING
    wizard_step: int = 1
    reports: list[ImpactReport] = []
    selected_report_id: Optional[str] = None
    draft: Draft = Field(default_factory=Draft)
    processing: bool = False
    recording: bool = False
    scroll_resets: int = 0

    @property
    def selected_report(self) -> Optional[ImpactReport]:
        for report in self.reports:
            if report.id == self.selected_report_id:
                return report
        return None


# --- Request bodies ---

class NavigateRequest(CamelModel):
    view: ViewState


class DraftDetailsUpdate(CamelModel):
    """Partial update of the summary-step form fields."""
    campaign_name: Optional[str] = None
    location: Optional[str] = None
    beneficiaries_count: Optional[int] = None
    language: Optional[str] = None
    currency: Optional[str] = None

    @field_validator("beneficiaries_count")
    @classmethod
    def non_negative(cls, value):
        if value is not None and value < 0:
            raise ValueError("Beneficiary count cannot be negative")
        return value

    @field_validator("language")
    @classmethod
    def supported_language(cls, value):
        return _check_language(value)

    @field_validator("currency")
    @classmethod
    def supported_currency(cls, value):
        return _check_currency(value)


class MediaUpload(CamelModel):
    """Request body for an upload sent as base64 instead of multipart."""
    data: str
    media_type: Optional[str] = None


class LocationReading(CamelModel):
    """A one-shot geolocation result forwarded by the device.

    Either both coordinates or an error message is set.
    """
    lat: Optional[float] = None
    lng: Optional[float] = None
    error: Optional[str] = None


class TranslateRequest(CamelModel):
    language: str

    @field_validator("language")
    @classmethod
    def supported_language(cls, value):
        return _check_language(value)


# --- Responses ---

class DashboardStats(CamelModel):
    total_reports: int
    lives_impacted: int
    funds_distributed: float


class DashboardResponse(CamelModel):
    stats: DashboardStats
    reports: list[ImpactReport]


class LineItemView(CamelModel):
    name: str
    quantity: int
    price: float
    line_total: float


class ReceiptView(CamelModel):
    store_name: str
    date: Optional[str] = None
    total_amount: float
    currency: str
    trust_score: int
    trust_level: str
    fraud_notes: Optional[str] = None
    items: list[LineItemView]


class ReportView(CamelModel):
    """Read-only presentation of one report with display-time totals."""
    report: ImpactReport
    gps_label: Optional[str] = None
    receipts: list[ReceiptView]
    line_items: list[LineItemView]
    photo_count: int
