# paintledger/finance/errors.py
"""Errors raised by the calculation core."""


class ValidationError(ValueError):
    """Input that cannot be calculated with.

    ``field`` names the offending input (``"quantity"``, ``"discount_amount"``,
    ``"sub_labor_pct"`` ...) so callers can point the user at it.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message

    def to_dict(self) -> dict:
        return {'error': self.message, 'field': self.field}
