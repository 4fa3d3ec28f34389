"""Success/failure results returned by the game engine.

Expected failures (unknown player, not enough coins, ...) are values, not
exceptions; the HTTP layer maps ``ErrorCode.kind`` onto a status code.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    NOT_FOUND = 'not_found'
    INVALID_INPUT = 'invalid_input'
    FORBIDDEN = 'forbidden'
    PURCHASE_REJECTED = 'purchase_rejected'


class ErrorCode(str, Enum):
    PLAYER_NOT_FOUND = 'player_not_found'
    ITEM_NOT_FOUND = 'item_not_found'
    PATH_NOT_FOUND = 'path_not_found'
    INVALID_NAME = 'invalid_name'
    INVALID_TEAM = 'invalid_team'
    MISSING_FIELD = 'missing_field'
    JOIN_BLOCKED = 'join_blocked'
    GAME_NOT_ACTIVE = 'game_not_active'
    ALREADY_OWNED = 'already_owned'
    INSUFFICIENT_FUNDS = 'insufficient_funds'
    NO_VALID_TARGET = 'no_valid_target'

    @property
    def kind(self) -> ErrorKind:
        return _KINDS[self]


_KINDS = {
    ErrorCode.PLAYER_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.ITEM_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.PATH_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.INVALID_NAME: ErrorKind.INVALID_INPUT,
    ErrorCode.INVALID_TEAM: ErrorKind.INVALID_INPUT,
    ErrorCode.MISSING_FIELD: ErrorKind.INVALID_INPUT,
    ErrorCode.JOIN_BLOCKED: ErrorKind.FORBIDDEN,
    ErrorCode.GAME_NOT_ACTIVE: ErrorKind.PURCHASE_REJECTED,
    ErrorCode.ALREADY_OWNED: ErrorKind.PURCHASE_REJECTED,
    ErrorCode.INSUFFICIENT_FUNDS: ErrorKind.PURCHASE_REJECTED,
    ErrorCode.NO_VALID_TARGET: ErrorKind.PURCHASE_REJECTED,
}

HTTP_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.PURCHASE_REJECTED: 400,
}


@dataclass(frozen=True)
class Result:
    value: Any = None
    error: Optional[ErrorCode] = None
    message: str = ''

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status_code(self) -> int:
        if self.ok:
            return 200
        return HTTP_STATUS[self.error.kind]

    @classmethod
    def success(cls, value=None) -> 'Result':
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorCode, message: str) -> 'Result':
        return cls(error=error, message=message)
