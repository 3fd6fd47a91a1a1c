"""Read-only presentation of reports for the dashboard and report view."""

from typing import Optional

from ..models import (
    Coordinates,
    DashboardStats,
    ImpactReport,
    LineItemView,
    ReceiptData,
    ReceiptItem,
    ReceiptView,
    ReportView,
)


def trust_level(trust_score: int) -> str:
    """Bucket a trust score into the badge shown next to a receipt."""
    if trust_score > 80:
        return "high"
    if trust_score > 50:
        return "medium"
    return "low"


def gps_label(coordinates: Optional[Coordinates]) -> Optional[str]:
    if coordinates is None:
        return None
    return f"{coordinates.lat:.6f}, {coordinates.lng:.6f}"


def _line_item(item: ReceiptItem) -> LineItemView:
    return LineItemView(
        name=item.name,
        quantity=item.quantity,
        price=item.price,
        line_total=item.line_total,
    )


def render_receipt(receipt: ReceiptData) -> ReceiptView:
    return ReceiptView(
        store_name=receipt.store_name,
        date=receipt.date,
        total_amount=receipt.total_amount,
        currency=receipt.currency,
        trust_score=receipt.trust_score,
        trust_level=trust_level(receipt.trust_score),
        fraud_notes=receipt.fraud_notes,
        items=[_line_item(item) for item in receipt.items],
    )


def render_report(report: ImpactReport) -> ReportView:
    """
    Build the report view.

    Line totals are computed here and never stored on the report. The
    financial table flattens the items of every receipt in receipt order.
    """
    return ReportView(
        report=report,
        gps_label=gps_label(report.coordinates),
        receipts=[render_receipt(receipt) for receipt in report.receipts],
        line_items=[_line_item(item) for receipt in report.receipts for item in receipt.items],
        photo_count=len(report.photos),
    )


def dashboard_stats(reports: list[ImpactReport]) -> DashboardStats:
    return DashboardStats(
        total_reports=len(reports),
        lives_impacted=sum(report.beneficiaries_count for report in reports),
        funds_distributed=sum(report.total_spend for report in reports),
    )
