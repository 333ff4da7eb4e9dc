"""
Domain errors raised by the ledger services.

Routes do not catch these; ``kavabar.main`` registers one handler for ``LedgerError``
that turns any of them into a JSON ``{"detail": ...}`` response.
"""


class LedgerError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(LedgerError):
    """Missing field, non-finite number or a value outside its allowed range."""

    status_code = 400


class NotFoundError(LedgerError):
    status_code = 404


class ScopeViolation(LedgerError):
    """The caller tried to touch a row owned by someone else."""

    status_code = 403
