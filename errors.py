"""Domain errors raised by the services and mapped to HTTP responses in main.py."""


class MindPalError(Exception):
    status_code = 400
    detail = "Request could not be completed"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class AlreadyJournaledToday(MindPalError):
    status_code = 409
    detail = "You have already made a journal entry today. Come back tomorrow!"


class UserNotFound(MindPalError):
    status_code = 404
    detail = "User not found"


class UserAlreadyExists(MindPalError):
    status_code = 400


class EntryNotFound(MindPalError):
    status_code = 404
    detail = "Journal entry not found"


class TopicNotFound(MindPalError):
    status_code = 404
    detail = "Topic not found"


class ReplyNotFound(MindPalError):
    status_code = 404
    detail = "Reply not found"


class ItemNotFound(MindPalError):
    status_code = 404
    detail = "Shop item not found"


class ItemAlreadyOwned(MindPalError):
    status_code = 409
    detail = "Your pet already owns this item"


class InsufficientCoins(MindPalError):
    status_code = 400
    detail = "Not enough coins"
