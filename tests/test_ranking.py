import unittest

from doubles.domain.models import PAIR1, PAIR2, determine_winner
from doubles.domain.ranking import (
    compute_rankings,
    index_blowouts,
    is_blowout,
    recompute_rankings,
    unknown_player_ids,
)
from tests.helpers.factory import make_players, make_result


class DetermineWinnerTests(unittest.TestCase):
    def test_winner_table(self) -> None:
        cases = [
            (6, 0, PAIR1),
            (0, 6, PAIR2),
            (7, 5, PAIR1),
            (4, 6, PAIR2),
            (3, 3, PAIR1),
            (0, 0, PAIR1),
        ]
        for pair1_score, pair2_score, expected in cases:
            with self.subTest(score=(pair1_score, pair2_score)):
                self.assertEqual(determine_winner(pair1_score, pair2_score), expected)

    def test_blowout_scores(self) -> None:
        self.assertTrue(is_blowout(6, 0))
        self.assertTrue(is_blowout(0, 6))
        self.assertFalse(is_blowout(6, 1))
        self.assertFalse(is_blowout(7, 0))
        self.assertFalse(is_blowout(None, None))


class RecomputeRankingsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.players = make_players(6)

    def test_every_player_gets_a_zero_row(self) -> None:
        rankings = recompute_rankings(self.players, [])
        self.assertEqual(sorted(rankings), [1, 2, 3, 4, 5, 6])
        for ranking in rankings.values():
            self.assertEqual(
                (ranking.games_played, ranking.games_won, ranking.sets_played, ranking.sets_won, ranking.points),
                (0, 0, 0, 0, 0),
            )
        self.assertEqual(rankings[3].player_name, "Player 3")

    def test_single_blowout_win(self) -> None:
        result = make_result((1, 2), (3, 4), 6, 0, set_number=1)
        rankings = recompute_rankings(self.players, [result])

        for player_id in (1, 2):
            ranking = rankings[player_id]
            self.assertEqual(ranking.points, 5)
            self.assertEqual(ranking.games_played, 1)
            self.assertEqual(ranking.games_won, 1)
            self.assertEqual(ranking.sets_played, 1)
            self.assertEqual(ranking.sets_won, 1)
        for player_id in (3, 4):
            ranking = rankings[player_id]
            self.assertEqual(ranking.points, 0)
            self.assertEqual(ranking.games_played, 1)
            self.assertEqual(ranking.games_won, 0)
            self.assertEqual(ranking.sets_won, 0)

    def test_set_number_weights_sets_and_points(self) -> None:
        result = make_result((1, 2), (3, 4), 6, 4, set_number=3)
        rankings = recompute_rankings(self.players, [result])

        self.assertEqual(rankings[1].sets_played, 3)
        self.assertEqual(rankings[1].sets_won, 3)
        self.assertEqual(rankings[1].points, 1 + 3)
        self.assertEqual(rankings[3].sets_played, 3)
        self.assertEqual(rankings[3].sets_won, 0)
        self.assertEqual(rankings[3].points, 0)

    def test_points_are_clamped_after_each_result(self) -> None:
        results = [
            make_result((1, 2), (3, 4), 2, 6, set_number=3),
            make_result((1, 2), (3, 4), 6, 4, set_number=1),
        ]
        rankings = recompute_rankings(self.players, results)
        # 1 - 3 clamps to 0 before the win adds 1 + 1.
        self.assertEqual(rankings[1].points, 2)

    def test_incomplete_results_do_not_aggregate(self) -> None:
        result = make_result((1, 2), (3, 4), 6, 3, completed=False)
        rankings = recompute_rankings(self.players, [result])
        self.assertEqual(rankings[1].games_played, 0)
        self.assertEqual(rankings[1].points, 0)

    def test_blowout_bonus_counts_whole_history(self) -> None:
        results = [
            make_result((1, 2), (3, 4), 6, 0, set_number=1),
            make_result((1, 5), (3, 6), 6, 3, set_number=2),
        ]
        rankings = recompute_rankings(self.players, results)
        # Second win re-applies the bonus for the earlier 6-0.
        self.assertEqual(rankings[1].points, (1 + 1 + 3) + (1 + 2 + 3))
        self.assertEqual(rankings[5].points, 1 + 2)
        self.assertEqual(rankings[3].points, 0)

    def test_incomplete_blowout_still_feeds_bonus(self) -> None:
        results = [
            make_result((1, 2), (3, 4), 6, 0, completed=False),
            make_result((1, 2), (3, 4), 6, 2, set_number=1),
        ]
        rankings = recompute_rankings(self.players, results)
        self.assertEqual(rankings[1].games_played, 1)
        self.assertEqual(rankings[1].points, 1 + 1 + 3)

    def test_unknown_players_are_skipped(self) -> None:
        result = make_result((1, 99), (3, 4), 6, 1)
        rankings = recompute_rankings(self.players, [result])
        self.assertNotIn(99, rankings)
        self.assertEqual(rankings[1].games_won, 1)
        self.assertEqual(unknown_player_ids(self.players, [result]), [99])

    def test_recompute_is_idempotent(self) -> None:
        results = [
            make_result((1, 2), (3, 4), 6, 0),
            make_result((5, 6), (1, 3), 4, 6, set_number=2),
            make_result((2, 4), (5, 6), 3, 3),
        ]
        first = compute_rankings(self.players, results)
        second = compute_rankings(self.players, results)
        self.assertEqual(first, second)
        self.assertIsNot(first[0], second[0])

    def test_compute_rankings_sorts_by_points_then_id(self) -> None:
        results = [make_result((4, 2), (1, 3), 6, 2)]
        ordered = compute_rankings(self.players, results)
        self.assertEqual([item.player_id for item in ordered], [2, 4, 1, 3, 5, 6])

    def test_index_blowouts_uses_declared_winner(self) -> None:
        results = [
            make_result((1, 2), (3, 4), 0, 6),
            make_result((1, 2), (3, 4), 6, 0),
            make_result((1, 2), (3, 4), 6, 1),
        ]
        index = index_blowouts(results)
        self.assertEqual(index[1], (1, 1))
        self.assertEqual(index[3], (1, 1))
        self.assertNotIn(5, index)


if __name__ == "__main__":
    unittest.main()
