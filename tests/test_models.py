import json
import unittest

from doubles.domain.models import (
    ROLE_ADMIN,
    ROLE_PLAYER,
    ROLE_SUPERADMIN,
    CourtPairing,
    Game,
    MatchResult,
    PlayerRanking,
    role_allows,
)
from tests.helpers.factory import make_pair, make_player, make_result


class WireFormatTests(unittest.TestCase):
    def test_match_result_survives_json(self) -> None:
        result = make_result((1, 2), (3, 4), 6, 2, set_number=2, result_id=7)
        payload = json.loads(json.dumps(result.to_dict()))

        self.assertEqual(payload["winner"], "pair1")
        self.assertEqual(payload["gameDate"], "2025-03-01")
        self.assertEqual(payload["pair2"]["player1"]["id"], 3)
        self.assertEqual(MatchResult.from_dict(payload), result)

    def test_match_result_rejects_unknown_winner(self) -> None:
        payload = make_result((1, 2), (3, 4), 6, 2).to_dict()
        payload["winner"] = "team1"
        with self.assertRaises(ValueError):
            MatchResult.from_dict(payload)

    def test_match_result_rejects_winner_against_score(self) -> None:
        payload = make_result((1, 2), (3, 4), 0, 6).to_dict()
        payload["winner"] = "pair1"
        with self.assertRaises(ValueError):
            MatchResult.from_dict(payload)

        tie = make_result((1, 2), (3, 4), 5, 5, winner="pair2").to_dict()
        self.assertEqual(MatchResult.from_dict(tie).winner, "pair2")

    def test_court_pairing_survives_json(self) -> None:
        pairing = CourtPairing(
            court_id=2,
            court_name="Moric",
            pair1=make_pair(1, make_player(2, alias="Tito")),
            pair2=make_pair(3, 4),
            sets=3,
            game_date="2025-05-10",
        )
        payload = json.loads(json.dumps(pairing.to_dict()))
        self.assertEqual(payload["courtName"], "Moric")
        self.assertEqual(payload["pair1"]["player2"]["alias"], "Tito")
        self.assertEqual(CourtPairing.from_dict(payload), pairing)

    def test_game_date_is_normalized_to_iso(self) -> None:
        game = Game.from_dict({"gameDate": "2025-05-10T18:00:00", "courtIds": [1, 2]})
        self.assertEqual(game.game_date, "2025-05-10")
        self.assertEqual(game.status, "pending")
        self.assertEqual(game.sets_per_match, 3)

    def test_ranking_round_trip(self) -> None:
        ranking = PlayerRanking(player_id=5, player_name="Ana", games_played=3, points=8)
        self.assertEqual(PlayerRanking.from_dict(ranking.to_dict()), ranking)


class RoleTests(unittest.TestCase):
    def test_role_hierarchy(self) -> None:
        cases = [
            (ROLE_SUPERADMIN, ROLE_SUPERADMIN, True),
            (ROLE_SUPERADMIN, ROLE_ADMIN, True),
            (ROLE_ADMIN, ROLE_ADMIN, True),
            (ROLE_ADMIN, ROLE_PLAYER, True),
            (ROLE_ADMIN, ROLE_SUPERADMIN, False),
            (ROLE_PLAYER, ROLE_PLAYER, True),
            (ROLE_PLAYER, ROLE_ADMIN, False),
            (None, ROLE_PLAYER, False),
        ]
        for role, required, expected in cases:
            with self.subTest(role=role, required=required):
                self.assertEqual(role_allows(role, required), expected)


if __name__ == "__main__":
    unittest.main()
