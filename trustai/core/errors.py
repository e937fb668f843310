from __future__ import annotations


class ValidationError(Exception):
    """Raised when an input payload is malformed or missing."""


class PayloadTooLargeError(ValidationError):
    """Raised when an upload exceeds the configured size limit."""


class NotFoundError(LookupError):
    """Raised when an item, session or project id is no longer present."""


class NoContentError(ValueError):
    """Raised when a report is requested without any completed content."""


class BatchInProgressError(RuntimeError):
    """Raised when a queue run is requested while another one is outstanding."""


class ReportInProgressError(RuntimeError):
    """Raised when a report is requested while another one is being generated."""


class AdapterError(RuntimeError):
    """Base class for failures reported by an external AI adapter."""

    kind = "adapter_error"


class ConfigurationMissing(AdapterError):
    """Raised when the upstream credential is not configured."""

    kind = "configuration_missing"


class UpstreamError(AdapterError):
    """Raised when the upstream inference service call fails."""

    kind = "upstream_error"
