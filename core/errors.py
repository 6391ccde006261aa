# core/errors.py


class TravelPlannerError(RuntimeError):
    """Base class for every failure surfaced by the planner."""


class ConfigurationError(TravelPlannerError):
    pass


class InvalidRequestError(TravelPlannerError):
    pass


class ResolutionError(TravelPlannerError):
    """Free text (city, airport) could not be mapped to a code or coordinates."""


class UpstreamError(TravelPlannerError):
    """A vendor API answered with a non-success status.

    ``text`` keeps the vendor's raw body so callers can surface it.
    """

    def __init__(self, service: str, status: int | None, text: str = ""):
        self.service = service
        self.status = status
        self.text = text
        label = f"{service} {status}" if status is not None else service
        super().__init__(f"{label}: {text}" if text else label)


class VendorParseError(UpstreamError):
    """Vendor JSON did not have the expected shape."""

    def __init__(self, service: str, text: str):
        super().__init__(service, None, text)


class ItineraryGenerationError(TravelPlannerError):
    pass
