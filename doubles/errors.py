"""Domain exceptions shared by the core and the services."""

from __future__ import annotations


class DoublesError(ValueError):
    """Base class for all scheduler errors."""


class NotFoundError(DoublesError):
    def __init__(self, entity: str, entity_id: object) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found.")


class PairingValidationError(DoublesError):
    """Pairings cannot be generated for the given players and courts."""

    INSUFFICIENT_PLAYERS = "insufficient_players"
    PLAYER_MULTIPLE = "player_multiple"
    INSUFFICIENT_COURTS = "insufficient_courts"

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        super().__init__(message)


class MatchResultError(DoublesError):
    pass


class PlayerInUseError(DoublesError):
    def __init__(self, player_id: int, results_count: int) -> None:
        self.player_id = player_id
        self.results_count = results_count
        super().__init__(
            f"Player {player_id} appears in {results_count} match result(s) and cannot be deleted."
        )


class CourtNameError(DoublesError):
    pass
