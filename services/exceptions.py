"""Exception types raised by the impact and gamification services."""


class ImpactCalculationError(ValueError):
    """Base class for errors that reject an activity before it is stored."""


class UnknownActivityType(ImpactCalculationError):
    def __init__(self, category, activity_type):
        self.category = category
        self.activity_type = activity_type
        super().__init__(f"Unknown activity type '{activity_type}' for category '{category}'")


class InvalidAmount(ImpactCalculationError):
    def __init__(self, amount):
        self.amount = amount
        super().__init__(f"Invalid amount: {amount!r} (must be a finite, non-negative number within the allowed range)")


class ExternalSignalUnavailable(Exception):
    """An environmental data source could not be reached or returned bad data.

    Never propagated out of the impact calculator; the calculator falls back to
    the default constant for the signal and lowers the reported accuracy.
    """

    def __init__(self, signal, reason=''):
        self.signal = signal
        self.reason = reason
        super().__init__(f"{signal} unavailable: {reason}" if reason else f"{signal} unavailable")


class AchievementAlreadyUnlocked(Exception):
    def __init__(self, user_id, achievement_id):
        self.user_id = user_id
        self.achievement_id = achievement_id
        super().__init__(f"Achievement '{achievement_id}' already unlocked for user {user_id}")


class FinanceValidationError(ValueError):
    """Invalid transaction, budget or goal input."""
