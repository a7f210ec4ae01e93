class AuditError(Exception):
    """Base class for errors raised around (never inside) the rule engine."""


class AuditInputError(AuditError):
    """The caller asked for something the auditor cannot do (no input, unknown rule)."""


class PageFetchError(AuditError):
    """A page could not be fetched or rendered for auditing."""
