"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth / role
  2xxx: Live session
  3xxx: Ledger / bidding
  9xxx: System

Every subclass carries a stable ``kind`` so callers can log and branch on
the failure category without parsing messages.
"""


class AppError(Exception):
    """Base application error."""

    kind: str = "Error"

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth / role ---

class UnauthorizedError(AppError):
    kind = "Unauthorized"

    def __init__(self, detail: str = "Only the session auctioneer may do this") -> None:
        super().__init__(1001, detail, 403)


class InvalidTokenError(AppError):
    kind = "Unauthorized"

    def __init__(self) -> None:
        super().__init__(1002, "Token is invalid or expired", 401)


# --- 2xxx: Live session ---

class AlreadyActiveError(AppError):
    kind = "AlreadyActive"

    def __init__(self, auctioneer_id: str) -> None:
        super().__init__(
            2001, f"Auctioneer {auctioneer_id} already has a running session", 409
        )


class NotFoundError(AppError):
    kind = "NotFound"

    def __init__(self, detail: str) -> None:
        super().__init__(2002, detail, 404)


class PlayerNotInPoolError(AppError):
    kind = "PlayerNotInPool"

    def __init__(self, player_id: str) -> None:
        super().__init__(2003, f"Player {player_id} is not in the session pool", 422)


class InvalidSessionConfigError(AppError):
    kind = "InvalidConfig"

    def __init__(self, detail: str) -> None:
        super().__init__(2004, f"Invalid session configuration: {detail}", 422)


# --- 3xxx: Ledger / bidding ---

class InvalidStateError(AppError):
    kind = "InvalidState"

    def __init__(self, action: str, state: str) -> None:
        super().__init__(3001, f"Cannot {action} while ledger is {state}", 409)


class InsufficientPurseError(AppError):
    kind = "InsufficientPurse"

    def __init__(self, team_id: str, required: int, available: int) -> None:
        super().__init__(
            3002,
            f"Insufficient purse for team {team_id}: "
            f"required {required} cents, available {available} cents",
            422,
        )


class InvalidBidAmountError(AppError):
    kind = "InvalidBidAmount"

    def __init__(self, detail: str) -> None:
        super().__init__(3003, f"Invalid bid amount: {detail}", 422)


class NoBidsPlacedError(AppError):
    kind = "NoBidsPlaced"

    def __init__(self, player_id: str) -> None:
        super().__init__(3004, f"No bids placed for player {player_id}", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    kind = "Internal"

    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
