"""Exception hierarchy shared by the core, the room manager and the HTTP layer."""

from __future__ import annotations


class BingoHallError(Exception):
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class MalformedCardError(BingoHallError, ValueError):
    """A card that is not a 5x5 grid, or fails wire validation."""

    status_code = 400
    default_message = "Malformed card"


class RoomNotFoundError(BingoHallError):
    status_code = 404
    default_message = "Room does not exist"


class NotAuthorizedError(BingoHallError):
    status_code = 403
    default_message = "Not authorized"


class GameNotActiveError(BingoHallError):
    status_code = 400
    default_message = "Game not active"


class CardNotAssignedError(BingoHallError):
    status_code = 400
    default_message = "No card assigned to this player"


class BadRequestError(BingoHallError):
    status_code = 400
    default_message = "Bad request"
