"""Custom exception hierarchy for the analytics engine."""


class TradeBuddyError(Exception):
    """Base exception for all TradeBuddy errors."""


# --- Configuration ---
class ConfigError(TradeBuddyError):
    """Invalid or unreadable configuration."""


# --- Input ---
class InvalidInputError(TradeBuddyError, TypeError):
    """Trade history is structurally invalid (not a list of records).

    Raised only for top-level failures.  Malformed individual records are
    coerced or dropped by the normalizer instead.
    """

    def __init__(self, received: object):
        self.received_type = type(received).__name__
        super().__init__(
            f"Trade history must be a list of trade records, got {self.received_type}"
        )
