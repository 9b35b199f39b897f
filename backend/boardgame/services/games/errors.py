class GameError(Exception):
    """Base for errors surfaced to the caller as ``{'error': message}``."""
    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.message}


class NotFound(GameError):
    status_code = 404


class Forbidden(GameError):
    status_code = 403


class Conflict(GameError):
    status_code = 409


class InvalidInput(GameError):
    status_code = 400


class AlreadyTerminal(GameError):
    status_code = 400


class StorageError(GameError):
    """The commit failed and was rolled back; the action had no effect."""
    status_code = 503
