from fastapi import HTTPException, status


class ScoreSheetException(HTTPException):
    error_type = "error"

    def __init__(self, detail: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(status_code=status_code, detail=detail)


class ValidationError(ScoreSheetException):
    """Caller-supplied data breaks a rule. The message is shown to the user as-is."""
    error_type = "validation_error"

    def __init__(self, detail: str):
        super().__init__(detail)


class NotFoundError(ScoreSheetException):
    error_type = "not_found"

    def __init__(self, what: str = "Resource"):
        super().__init__(f"{what} not found", status.HTTP_404_NOT_FOUND)


class SessionNotFound(NotFoundError):
    def __init__(self):
        super().__init__("Session")


class GameNotFound(NotFoundError):
    def __init__(self):
        super().__init__("Game")


class ForbiddenError(ScoreSheetException):
    error_type = "forbidden"

    def __init__(self, detail: str = "You are not allowed to perform this action"):
        super().__init__(detail, status.HTTP_403_FORBIDDEN)


class StorageError(ScoreSheetException):
    """The store failed. Details go to the log, never to the client."""
    error_type = "server_error"

    def __init__(self):
        super().__init__("Server error", status.HTTP_500_INTERNAL_SERVER_ERROR)


class ParseError(ScoreSheetException):
    error_type = "parse_error"

    def __init__(self):
        super().__init__("Invalid request payload")


class WrongScoringKind(ValidationError):
    def __init__(self, expected: str):
        super().__init__(f"This session does not use {expected} scoring")
