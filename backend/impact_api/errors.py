class ImpactAPIError(Exception):
    """Base class for domain errors raised by the service layer."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MediaCaptureError(ImpactAPIError):
    """Camera, microphone or geolocation failure reported by the device.

    The message is shown to the user as a blocking alert.
    """

    status_code = 400


class WizardBusyError(ImpactAPIError):
    """Another upload, capture or finalize call is still in flight."""

    status_code = 409

    def __init__(self, message: str = "Another operation is still processing"):
        super().__init__(message)


class FinalizationBlockedError(ImpactAPIError):
    status_code = 409


class InvalidTransitionError(ImpactAPIError):
    status_code = 409


class ReportNotFoundError(ImpactAPIError):
    status_code = 404

    def __init__(self, report_id: str):
        super().__init__(f"Report not found: {report_id}")
        self.report_id = report_id
