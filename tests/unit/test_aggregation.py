"""Tests for per-game statistics aggregation."""

import pytest
from showtrack_analytics.aggregation import CASH_HUNT_COLS, CASH_HUNT_ROWS, aggregate_game_stats


def _number(sector, multiplier=0, **extra):
    return {"wheelResult": {"type": "WinningNumber", "wheelSector": sector}, "maxMultiplier": multiplier, **extra}


def _bonus(name, multiplier=0, **extra):
    return {"wheelResult": {"type": "BonusRound", "wheelSector": name}, "maxMultiplier": multiplier, **extra}


class TestEmptyWindow:
    def test_empty_input(self):
        stats = aggregate_game_stats([])

        assert stats.total_count == 0
        assert stats.agg_stats == []
        assert stats.best_multipliers == []
        assert stats.top_slot_to_wheel_result_stats == []
        assert stats.best_individual_wins == []
        assert stats.cash_hunt_avg_stats_by_position is None
        assert stats.cash_hunt_symbol_stats == []
        assert stats.crazy_bonus_flapper_stats == []
        assert stats.coin_flip_stats == []

    def test_empty_document_uses_camel_case(self):
        document = aggregate_game_stats([]).model_dump(by_alias=True)

        assert document == {
            "totalCount": 0,
            "aggStats": [],
            "bestMultipliers": [],
            "topSlotToWheelResultStats": [],
            "bestIndividualWins": [],
            "cashHuntAvgStatsByPosition": None,
            "cashHuntSymbolStats": [],
            "crazyBonusFlapperStats": [],
            "coinFlipStats": [],
        }


class TestFrequencyTable:
    def test_counts_and_percentages(self, make_result):
        results = [
            make_result(_number("1"), settled_offset_seconds=-10),
            make_result(_number("2"), settled_offset_seconds=-20),
            make_result(_number("1"), settled_offset_seconds=-30),
            make_result(_number("1"), settled_offset_seconds=-40),
        ]

        stats = aggregate_game_stats(results)

        assert stats.total_count == 4
        assert [(s.wheel_result, s.count, s.percentage) for s in stats.agg_stats] == [
            ("1", 3, 75.0),
            ("2", 1, 25.0),
        ]
        assert all(s.hot_frequency_percentage == 0 for s in stats.agg_stats)

    def test_percentages_sum_to_hundred(self, make_result):
        sectors = ["1", "2", "5", "10", "1", "2", "1"]
        results = [
            make_result(_number(sector), settled_offset_seconds=-i) for i, sector in enumerate(sectors)
        ]

        stats = aggregate_game_stats(results)

        assert sum(s.percentage for s in stats.agg_stats) == pytest.approx(100, abs=0.05)

    def test_unlabelled_rounds_dilute_percentages(self, make_result):
        results = [
            make_result(_number("1")),
            make_result(_number("2"), settled_offset_seconds=-1),
            make_result({"maxMultiplier": 3}, settled_offset_seconds=-2),
            make_result({}, settled_offset_seconds=-3),
        ]

        stats = aggregate_game_stats(results)

        assert stats.total_count == 4
        assert [s.percentage for s in stats.agg_stats] == [25, 25]

    def test_last_occurred_and_last_seen_before(self, make_result):
        results = [
            make_result(_number("1"), settled_offset_seconds=0),
            make_result(_number("2"), settled_offset_seconds=-60),
            make_result(_number("5"), settled_offset_seconds=-120),
            make_result(_number("2"), settled_offset_seconds=-180),
        ]

        by_label = {s.wheel_result: s for s in aggregate_game_stats(results).agg_stats}

        assert by_label["1"].last_seen_before == 0
        assert by_label["2"].last_seen_before == 1
        assert by_label["5"].last_seen_before == 2
        assert by_label["2"].last_occurred_at == "2024-05-01T11:59:00.000Z"

    def test_results_without_outcome_count_only_toward_total(self, make_result):
        results = [make_result(_number("1")), make_result({}, settled_offset_seconds=-5)]

        stats = aggregate_game_stats(results)

        assert stats.total_count == 2
        assert stats.agg_stats[0].count == 1
        assert stats.agg_stats[0].percentage == 50.0


class TestBestMultipliers:
    def test_best_round_per_label(self, make_result):
        results = [
            make_result(_bonus("Pachinko", 100), external_id="p1", settled_offset_seconds=0),
            make_result(_bonus("CashHunt", 300), external_id="c1", settled_offset_seconds=-10),
            make_result(_bonus("Pachinko", 250), external_id="p2", settled_offset_seconds=-20),
        ]

        best = aggregate_game_stats(results).best_multipliers

        assert [(b.id, b.wheel_result, b.max_multiplier) for b in best] == [
            ("c1", "BonusRound", 300),
        ]

    def test_sorted_and_limited(self, make_result):
        results = [
            make_result(_number(str(n), n * 10), external_id=f"n{n}", settled_offset_seconds=-n)
            for n in range(1, 8)
        ]

        best = aggregate_game_stats(results).best_multipliers

        assert len(best) == 5
        assert [b.max_multiplier for b in best] == [70, 60, 50, 40, 30]
        assert best[0].big_win_stream_url == (
            "https://media.groundsplatform.com/streamer/clips/n7/index.m3u8"
        )

    def test_first_seen_kept_on_tie(self, make_result):
        results = [
            make_result(_number("1", 20), external_id="newer", settled_offset_seconds=0),
            make_result(_number("1", 20), external_id="older", settled_offset_seconds=-30),
        ]

        best = aggregate_game_stats(results).best_multipliers

        assert best[0].id == "newer"

    def test_custom_media_base(self, make_result):
        stats = aggregate_game_stats(
            [make_result(_number("1", 5), external_id="x1")], media_base_url="https://cdn.test/"
        )

        assert stats.best_multipliers[0].big_win_stream_url == "https://cdn.test/clips/x1/index.m3u8"


class TestTopSlot:
    def test_matched_buckets(self, make_result):
        results = [
            make_result(_number("1", isTopSlotMatchedToWheelResult=True)),
            make_result(_number("2", isTopSlotMatchedToWheelResult=False)),
            make_result(_number("2", isTopSlotMatchedToWheelResult=False)),
            make_result(_number("5", isTopSlotMatchedToWheelResult=False)),
            make_result(_number("5")),
        ]

        unmatched, matched = aggregate_game_stats(results).top_slot_to_wheel_result_stats

        assert unmatched.matched is False
        assert unmatched.total_count == 3
        assert unmatched.percentage == 75.0
        assert unmatched.top_slot_matched_long_term_average == 75.0
        assert matched.matched is True
        assert matched.total_count == 1
        assert matched.percentage == 25.0
        assert matched.top_slot_matched_frequency_percentage == 0

    def test_no_top_slot_data(self, make_result):
        buckets = aggregate_game_stats([make_result(_number("1"))]).top_slot_to_wheel_result_stats

        assert [(b.matched, b.total_count, b.percentage) for b in buckets] == [
            (False, 0, 0),
            (True, 0, 0),
        ]


class TestCashHunt:
    def test_grid_averages(self, make_result):
        first = _bonus(
            "CashHunt",
            cashHunt={
                "positions": [
                    [{"symbol": "rabbit", "multiplier": 10}, {"symbol": "hat", "multiplier": 50}],
                ]
            },
        )
        second = _bonus(
            "CashHunt",
            cashHunt={"positions": [[{"symbol": "hat", "multiplier": 30}]]},
        )

        grid = aggregate_game_stats([make_result(first), make_result(second)]).cash_hunt_avg_stats_by_position

        assert grid is not None
        assert len(grid.cash_hunt_avg_array) == CASH_HUNT_ROWS
        assert all(len(row) == CASH_HUNT_COLS for row in grid.cash_hunt_avg_array)
        assert grid.cash_hunt_avg_array[0][0] == 20
        assert grid.cash_hunt_avg_array[0][1] == 50
        assert grid.cash_hunt_avg_array[1][0] == 0
        assert grid.max_multiplier == 50
        assert grid.min_multiplier == 20

    def test_cells_beyond_grid_ignored(self, make_result):
        wide_row = [{"multiplier": 1}] * CASH_HUNT_COLS + [{"multiplier": 999}]
        outcome = _bonus("CashHunt", cashHunt={"positions": [wide_row]})

        grid = aggregate_game_stats([make_result(outcome)]).cash_hunt_avg_stats_by_position

        assert grid.max_multiplier == 1

    def test_positions_without_multipliers(self, make_result):
        outcome = _bonus("CashHunt", cashHunt={"positions": [[{"symbol": "hat"}]]})

        grid = aggregate_game_stats([make_result(outcome)]).cash_hunt_avg_stats_by_position

        assert grid.max_multiplier == 0
        assert grid.min_multiplier == 0

    def test_empty_positions_yield_zero_grid(self, make_result):
        outcome = _bonus("CashHunt", cashHunt={"positions": []})

        grid = aggregate_game_stats([make_result(outcome)]).cash_hunt_avg_stats_by_position

        assert grid is not None
        assert grid.cash_hunt_avg_array == [[0.0] * CASH_HUNT_COLS] * CASH_HUNT_ROWS
        assert grid.max_multiplier == 0
        assert grid.min_multiplier == 0

    def test_symbol_stats_sorted_by_average(self, make_result):
        outcome = _bonus(
            "CashHunt",
            cashHunt={
                "positions": [
                    [
                        {"symbol": "rabbit", "multiplier": 10},
                        {"symbol": "hat", "multiplier": 50},
                        {"symbol": "rabbit", "multiplier": 20},
                        {"multiplier": 75},
                    ]
                ]
            },
        )

        symbols = aggregate_game_stats([make_result(outcome)]).cash_hunt_symbol_stats

        assert [(s.symbol, s.avg_multiplier, s.count) for s in symbols] == [
            ("hat", 50, 1),
            ("rabbit", 15, 2),
        ]
        assert symbols[1].cash_hunt_long_term_average == 15
        assert symbols[1].cash_hunt_multiplier_frequency_percentage == 0


class TestBonusGames:
    def test_flapper_stats(self, make_result):
        results = [
            make_result(_bonus("CrazyBonus", crazyBonus={"flapper": {"symbol": "green", "multiplier": 10}})),
            make_result(_bonus("CrazyBonus", crazyBonus={"flapper": {"symbol": "green", "multiplier": 20}})),
            make_result(_bonus("CrazyBonus", crazyBonus={"flapper": {"multiplier": 5}})),
        ]

        flappers = {s.symbol: s for s in aggregate_game_stats(results).crazy_bonus_flapper_stats}

        assert flappers["green"].avg_multiplier == 15
        assert flappers["green"].flapper_long_term_average_multiplier == 15
        assert flappers["green"].flapper_multiplier_frequency_percentage == 0
        assert flappers["Unknown"].avg_multiplier == 5

    def test_zero_average_deviation_reported_as_zero(self, make_result):
        outcome = _bonus("CrazyBonus", crazyBonus={"flapper": {"symbol": "red", "multiplier": 0}})

        flapper = aggregate_game_stats([make_result(outcome)]).crazy_bonus_flapper_stats[0]

        assert flapper.flapper_multiplier_frequency_percentage == 0

    def test_coin_flip_stats(self, make_result):
        results = [
            make_result(_bonus("CoinFlip", coinFlip={"symbol": "red", "multiplier": 10})),
            make_result(_bonus("CoinFlip", coinFlip={"symbol": "red", "multiplier": 30})),
            make_result(_bonus("CoinFlip", coinFlip={"symbol": "blue", "multiplier": 0})),
        ]

        flips = {s.symbol: s for s in aggregate_game_stats(results).coin_flip_stats}

        assert flips["red"].count == 2
        assert flips["red"].avg_multiplier == 20
        assert flips["red"].percentage == pytest.approx(66.67)
        assert flips["red"].coin_flip_percentage_long_term_average == pytest.approx(66.67)
        assert flips["red"].coin_flip_multiplier_long_term_average == 20
        assert flips["blue"].coin_flip_multiplier_frequency_percentage == 0
        assert flips["blue"].coin_flip_frequency_percentage == 0


class TestBestIndividualWins:
    def test_top_winners(self, make_result):
        results = [
            make_result(
                _number("10", 10),
                external_id="r1",
                winners=[
                    {"screenName": "highroller", "winnings": 500.0},
                    {"screenName": "abc", "winnings": 50.0},
                    {"screenName": "nobody", "winnings": 0},
                    {"winnings": 900.0},
                ],
            ),
            make_result(
                _number("2", 2),
                external_id="r2",
                settled_offset_seconds=-30,
                winners=[{"screenName": "bigfish", "winnings": 800.0}],
            ),
        ]

        wins = aggregate_game_stats(results).best_individual_wins

        assert [(w.id, w.screen_name, w.win_amount, w.wheel_result) for w in wins] == [
            ("r2", "big...", 800.0, "2"),
            ("r1", "hig...", 500.0, "10"),
            ("r1", "abc", 50.0, "10"),
        ]
        assert wins[1].max_multiplier == 10

    def test_winners_without_label_skipped(self, make_result):
        result = make_result(
            {"maxMultiplier": 5}, winners=[{"screenName": "someone", "winnings": 10.0}]
        )

        assert aggregate_game_stats([result]).best_individual_wins == []

    def test_limited_to_leaderboard(self, make_result):
        winners = [{"screenName": f"p{i}", "winnings": float(i)} for i in range(1, 10)]

        wins = aggregate_game_stats([make_result(_number("1"), winners=winners)]).best_individual_wins

        assert [w.win_amount for w in wins] == [9.0, 8.0, 7.0, 6.0, 5.0]
