"""Exceptions raised at the I/O boundary. The grading core never raises these."""


class SiteGradeError(Exception):
    """Base class for SiteGrade errors."""


class ConfigError(SiteGradeError):
    """Settings are missing or invalid."""


class FetchError(SiteGradeError):
    """The scanned page could not be fetched."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class InvalidReportId(SiteGradeError):
    """Report id does not look like one we issue."""


class ReportNotFound(SiteGradeError):
    """No stored report with that id, or it has expired."""


class Unauthorized(SiteGradeError):
    """Stats token missing or wrong."""


class InvalidLead(SiteGradeError):
    """Consultation request is missing its name or has an unusable email."""
