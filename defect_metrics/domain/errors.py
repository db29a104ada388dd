"""
Error taxonomy for the defect metrics layer.

Raised inside a single metric fetch and converted by the orchestrator into
that metric's status marker; none of these ever abort sibling fetches.
"""


class DefectMetricsError(Exception):
    """Base class for all defect metrics errors."""


class TransportError(DefectMetricsError):
    """The request could not complete (network failure, HTTP error, undecodable body)."""


class EmptyResultError(DefectMetricsError):
    """Upstream explicitly reported that it has no data for the request."""


class MalformedPayloadError(DefectMetricsError):
    """Upstream returned data whose shape or types cannot be adapted."""
