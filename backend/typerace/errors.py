"""Errors raised by rooms and the registry.

Handlers in the session gateway decide which of these are reported back to
the requesting connection and which are dropped quietly.
"""


class RaceError(Exception):
    """Base class for every race/room failure."""

    message = 'Race error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class RoomNotFound(RaceError):
    message = 'Room not found'

    def __init__(self, code=None):
        super().__init__()
        self.code = code


class UnknownPlayer(RaceError):
    message = 'Player is not in this room'

    def __init__(self, player_id=None):
        super().__init__()
        self.player_id = player_id


class DuplicateStart(RaceError):
    message = 'Race has already started'


class RaceNotActive(RaceError):
    message = 'Race is not in progress'


class NotHost(RaceError):
    message = 'Only the host can start the race'


class InvalidPayload(RaceError):
    message = 'Invalid payload'


class NotEnoughPlayers(RaceError):
    message = 'Not enough players to start'
