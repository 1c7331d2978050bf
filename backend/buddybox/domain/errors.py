class BuddyBoxError(Exception):
    """Base class for every recoverable booking condition."""


class SlotNotFoundError(BuddyBoxError):
    pass


class DurationExceededError(BuddyBoxError):
    def __init__(self, max_duration: int) -> None:
        suffix = "" if max_duration == 1 else "s"
        super().__init__(f"Buddy Box closes at midnight. Max hours available: {max_duration} hr{suffix}.")
        self.max_duration = max_duration


class SlotUnavailableError(BuddyBoxError):
    pass


class SlotTakenError(BuddyBoxError):
    pass


class InvalidPartySizeError(BuddyBoxError):
    pass


class InvalidDurationError(BuddyBoxError):
    pass


class DuplicatePromoCodeError(BuddyBoxError):
    pass


class PromoNotFoundError(BuddyBoxError):
    pass


class NothingToUndoError(BuddyBoxError):
    pass


class QrGenerationFailedError(BuddyBoxError):
    pass


class PersistenceStaleError(BuddyBoxError):
    pass


class PersistenceUnavailableError(BuddyBoxError):
    pass
