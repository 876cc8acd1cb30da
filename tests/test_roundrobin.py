"""Tests for roundrobin.py — circle method generation and verification."""

import pytest

from leaguecal.models import Matchup, Round
from leaguecal.roundrobin import (
    compute_total_weeks, generate_round_robin, natural_rounds, verify_round_robin,
)


def _pairs(rnd):
    return [(m.team_a, m.team_b) for m in rnd.matchups]


class TestGenerateRoundRobin:
    def test_even_teams(self):
        rounds = generate_round_robin(["A", "B", "C", "D"])
        # 4 teams => 3 rounds, 2 games each
        assert len(rounds) == 3
        for r in rounds:
            assert len(r.matchups) == 2
            assert r.bye_teams == []

    def test_odd_teams(self):
        rounds = generate_round_robin(["A", "B", "C", "D", "E"])
        # 5 teams => 5 rounds, 2 games + 1 bye each
        assert len(rounds) == 5
        for r in rounds:
            assert len(r.matchups) == 2
            assert len(r.bye_teams) == 1

    def test_four_team_rotation(self):
        rounds = generate_round_robin(["A", "B", "C", "D"])
        assert _pairs(rounds[0]) == [("A", "D"), ("B", "C")]
        assert _pairs(rounds[1]) == [("A", "C"), ("D", "B")]
        assert _pairs(rounds[2]) == [("A", "B"), ("C", "D")]

    def test_odd_bye_rotates_from_last_team(self):
        rounds = generate_round_robin(["A", "B", "C", "D", "E"])
        assert [r.bye_teams for r in rounds] == [["E"], ["D"], ["C"], ["B"], ["A"]]

    def test_each_team_byes_once_odd(self):
        teams = [f"T{i}" for i in range(7)]
        result = verify_round_robin(generate_round_robin(teams), teams)
        assert all(count == 1 for count in result["byes_per_team"].values())

    def test_every_pair_plays_once_even(self):
        teams = [f"T{i}" for i in range(6)]
        result = verify_round_robin(generate_round_robin(teams), teams)
        assert result["valid"], result["errors"]

    def test_every_pair_plays_once_odd(self):
        teams = [f"T{i}" for i in range(7)]
        result = verify_round_robin(generate_round_robin(teams), teams)
        assert result["valid"], result["errors"]

    @pytest.mark.parametrize("n", [2, 3, 8, 11, 12, 13])
    def test_total_pairings(self, n):
        teams = [f"T{i}" for i in range(n)]
        rounds = generate_round_robin(teams)
        assert sum(len(r.matchups) for r in rounds) == n * (n - 1) // 2
        result = verify_round_robin(rounds, teams)
        assert result["valid"], result["errors"]
        for t in teams:
            assert result["games_per_team"][t] == n - 1

    def test_no_team_plays_twice_in_round(self):
        teams = [f"T{i}" for i in range(10)]
        for r in generate_round_robin(teams):
            seen = set()
            for m in r.matchups:
                assert m.team_a not in seen, f"{m.team_a} plays twice in round {r.number}"
                assert m.team_b not in seen, f"{m.team_b} plays twice in round {r.number}"
                seen.add(m.team_a)
                seen.add(m.team_b)

    def test_deterministic(self):
        teams = ["A", "B", "C", "D", "E", "F"]
        r1 = generate_round_robin(teams)
        r2 = generate_round_robin(teams)
        assert [_pairs(r) for r in r1] == [_pairs(r) for r in r2]

    def test_total_weeks_caps_rounds(self):
        rounds = generate_round_robin(["A", "B", "C", "D", "E", "F"], total_weeks=2)
        assert len(rounds) == 2
        assert [r.number for r in rounds] == [1, 2]

    def test_total_weeks_above_natural(self):
        rounds = generate_round_robin(["A", "B", "C", "D"], total_weeks=10)
        assert len(rounds) == 3

    def test_three_teams(self):
        rounds = generate_round_robin(["A", "B", "C"])
        assert [_pairs(r) for r in rounds] == [[("A", "B")], [("C", "A")], [("B", "C")]]
        assert [r.bye_teams for r in rounds] == [["C"], ["B"], ["A"]]

    def test_two_teams(self):
        rounds = generate_round_robin(["A", "B"])
        assert len(rounds) == 1
        assert _pairs(rounds[0]) == [("A", "B")]

    def test_one_team(self):
        assert generate_round_robin(["A"]) == []

    def test_empty(self):
        assert generate_round_robin([]) == []

    def test_duplicate_ids(self):
        with pytest.raises(ValueError):
            generate_round_robin(["A", "B", "A"])


class TestWeekCounts:
    @pytest.mark.parametrize("n,weeks", [(0, 0), (1, 0), (2, 1), (3, 3), (4, 3),
                                         (5, 5), (6, 5), (9, 9), (10, 9)])
    def test_compute_total_weeks(self, n, weeks):
        assert compute_total_weeks(n) == weeks

    def test_matches_natural_rounds(self):
        for n in range(2, 20):
            assert compute_total_weeks(n) == natural_rounds(n)


class TestVerifyRoundRobin:
    def test_detects_missing_matchup(self):
        rounds = [
            Round(1, [Matchup("A", "B")]),
            Round(2, [Matchup("A", "C")]),
        ]
        result = verify_round_robin(rounds, ["A", "B", "C"])
        assert not result["valid"]
        assert any("B vs C" in e for e in result["errors"])

    def test_detects_duplicate_matchup(self):
        rounds = [
            Round(1, [Matchup("A", "B")]),
            Round(2, [Matchup("A", "C")]),
            Round(3, [Matchup("B", "C")]),
            Round(4, [Matchup("B", "A")]),
        ]
        result = verify_round_robin(rounds, ["A", "B", "C"])
        assert not result["valid"]

    def test_detects_team_playing_twice_in_round(self):
        rounds = [Round(1, [Matchup("A", "B"), Matchup("A", "C")])]
        result = verify_round_robin(rounds, ["A", "B", "C"])
        assert not result["valid"]
        assert "Round 1: A appears 2 times" in result["errors"]

    def test_detects_bye_team_playing(self):
        rounds = [Round(1, [Matchup("A", "B")], bye_teams=["A"])]
        result = verify_round_robin(rounds, ["A", "B"])
        assert any("bye" in e for e in result["errors"])
