class MatchError(Exception):
    """Base class for match core errors. None of them are fatal to the server."""


class RoomJoinError(MatchError):
    """A join request was refused; ``message`` is safe to show to the client."""

    message = 'unable to join room'

    def __init__(self, message=None):
        if message:
            self.message = message
        super().__init__(self.message)


class InvalidRoomId(RoomJoinError):
    message = 'invalid room id'


class RoomFull(RoomJoinError):
    message = 'room full'


class StaleTargetError(MatchError):
    """A delayed combat effect resolved after the world moved on.

    Raised inside the timer callback and swallowed at the timer boundary; the
    client only ever sees this as a miss.
    """
