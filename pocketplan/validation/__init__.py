"""Form validation package."""

from pocketplan.validation.forms import (
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    MAX_TRANSACTION_DESCRIPTION_LENGTH,
    MIN_AMOUNT,
    FormValidator,
)

__all__ = [
    "MAX_DESCRIPTION_LENGTH",
    "MAX_NAME_LENGTH",
    "MAX_TRANSACTION_DESCRIPTION_LENGTH",
    "MIN_AMOUNT",
    "FormValidator",
]
