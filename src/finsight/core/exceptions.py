"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


# Prediction path


class InsufficientHistory(AppError):
    """Raised when a series is too short for an indicator or a prediction."""

    def __init__(self, message: str, required: int = 0, available: int = 0):
        self.required = required
        self.available = available
        super().__init__(message, code="INSUFFICIENT_HISTORY")


# Trade path


class PriceUnavailable(AppError):
    """Raised when no current quote can be obtained for a symbol."""

    def __init__(self, symbol: str, reason: str = ""):
        self.symbol = symbol
        detail = f": {reason}" if reason else ""
        super().__init__(
            f"Current price for {symbol} is unavailable{detail}",
            code="PRICE_UNAVAILABLE",
        )


class InsufficientFunds(AppError):
    """Raised when a buy costs more than the available cash."""

    def __init__(self, requested: str, available: str):
        super().__init__(
            f"Insufficient cash: order costs {requested}, available {available}",
            code="INSUFFICIENT_FUNDS",
        )


class InsufficientShares(AppError):
    """Raised when attempting to sell more shares than owned."""

    def __init__(self, symbol: str, requested: str, available: str):
        super().__init__(
            f"Insufficient shares of {symbol}: requested {requested}, available {available}",
            code="INSUFFICIENT_SHARES",
        )


class OrderRejected(AppError):
    """Raised when the trade gateway refuses or fails an order."""

    def __init__(self, message: str):
        super().__init__(message, code="ORDER_REJECTED")


class ReconciliationConflict(AppError):
    """Raised when a concurrent update changed a position or summary mid-reconcile."""

    def __init__(self, user_id: str, symbol: str):
        super().__init__(
            f"Concurrent update detected for {user_id}/{symbol}",
            code="RECONCILIATION_CONFLICT",
        )


class TradeCancelled(AppError):
    """Raised when a trade request is abandoned before submission."""

    def __init__(self, symbol: str):
        super().__init__(f"Trade for {symbol} was cancelled before submission", code="TRADE_CANCELLED")


# Assistant path


class IntentParseError(AppError):
    """Raised when a message cannot be resolved into a known trade intent."""

    def __init__(self, message: str):
        super().__init__(message, code="INTENT_PARSE_ERROR")
