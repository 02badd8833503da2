import random

import numpy as np
import pytest

from salvo.battleship import NO_RESULT, Board, ShotResult
from salvo.bot_logic import BLOCKED, DEAD, OPEN, BotLogic, BotMode, TargetingError
from salvo.coord_utils import Coordinate, Direction


def _hit(board: Board, bot: BotLogic, coord: Coordinate, result: ShotResult = ShotResult.HIT) -> None:
    """Record *result* at *coord* the way CPUPlayer.record_shot does."""
    board.set_result_at(coord, result)
    bot.register_result(coord, result)


# ----------------------------------------------------------------------
# Density map
# ----------------------------------------------------------------------


def test_single_miss_only_blocks_itself(board):
    board.set_result_at(Coordinate(5, 5), ShotResult.MISS)
    classes = BotLogic().base_classes(board)
    assert classes[5, 5] == BLOCKED
    classes[5, 5] = OPEN
    assert (classes == OPEN).all()


def test_hit_blocks_all_eight_neighbours(board):
    board.set_result_at(Coordinate(3, 3), ShotResult.HIT)
    classes = BotLogic().base_classes(board)
    assert classes[3, 3] == DEAD
    around = classes[2:5, 2:5].copy()
    around[1, 1] = BLOCKED
    assert (around == BLOCKED).all()
    assert classes[3, 5] == OPEN
    assert classes[1, 3] == OPEN


def test_sunk_ship_blocks_its_surroundings(board):
    board.set_result_at(Coordinate(0, 0), ShotResult.SINK)
    classes = BotLogic().base_classes(board)
    assert classes[0, 0] == DEAD
    assert classes[0, 1] == classes[1, 0] == classes[1, 1] == BLOCKED


def test_density_on_empty_board(board):
    density = BotLogic().density_map(board)
    # Corner: 3 horizontal + 3 vertical windows (lengths 4, 3, 2)
    assert density[0, 0] == OPEN + 6
    # Far enough from the edges to be covered by every window
    assert density[4, 4] == OPEN + 18
    assert density.max() == OPEN + 18
    assert np.array_equal(density, density.T)


def test_density_ignores_windows_through_a_miss(board):
    board.set_result_at(Coordinate(1, 0), ShotResult.MISS)
    density = BotLogic().density_map(board)
    # (0, 0) can only be covered vertically now
    assert density[0, 0] == OPEN + 3
    assert density[0, 1] == BLOCKED


def test_hunt_on_empty_board_targets_the_centre(board):
    for seed in range(20):
        bot = BotLogic(rng=random.Random(seed))
        assert bot.mode is BotMode.HUNT
        shot = bot.choose_shot(board)
        assert 3 <= shot.x <= 6 and 3 <= shot.y <= 6


def test_hunt_is_reproducible_with_the_same_seed(board):
    board.set_result_at(Coordinate(4, 4), ShotResult.MISS)
    a = BotLogic(rng=random.Random(99)).choose_shot(board)
    b = BotLogic(rng=random.Random(99)).choose_shot(board)
    assert a == b


def test_hunt_falls_back_to_any_untried_cell(board):
    board.shot_grid[:, :] = int(ShotResult.MISS)
    board.set_result_at(Coordinate(1, 1), ShotResult.HIT)
    board.shot_grid[0, 0] = NO_RESULT
    # (0, 0) touches a hit, so no cell is OPEN any more
    assert BotLogic().choose_shot(board) == Coordinate(0, 0)


def test_hunt_with_nothing_left_raises(board):
    board.shot_grid[:, :] = int(ShotResult.MISS)
    with pytest.raises(TargetingError):
        BotLogic().choose_shot(board)


# ----------------------------------------------------------------------
# Probe / sweep
# ----------------------------------------------------------------------


def test_first_hit_switches_to_probe(board):
    bot = BotLogic(rng=random.Random(0))
    _hit(board, bot, Coordinate(0, 0))
    assert bot.mode is BotMode.PROBE
    assert bot.choose_shot(board) in {Coordinate(1, 0), Coordinate(0, 1)}


def test_probe_skips_tried_neighbours(board):
    bot = BotLogic(rng=random.Random(0))
    _hit(board, bot, Coordinate(0, 0))
    board.set_result_at(Coordinate(1, 0), ShotResult.MISS)
    for _ in range(10):
        assert bot.choose_shot(board) == Coordinate(0, 1)


def test_probe_with_no_untried_neighbour_raises(board):
    bot = BotLogic()
    _hit(board, bot, Coordinate(0, 0))
    board.set_result_at(Coordinate(1, 0), ShotResult.MISS)
    board.set_result_at(Coordinate(0, 1), ShotResult.MISS)
    with pytest.raises(TargetingError):
        bot.choose_shot(board)


def test_second_hit_fixes_direction(board):
    bot = BotLogic()
    _hit(board, bot, Coordinate(3, 4))
    _hit(board, bot, Coordinate(3, 5))
    assert bot.last_hit_direction is Direction.DOWN
    assert bot.mode is BotMode.SWEEP
    assert bot.choose_shot(board) == Coordinate(3, 6)


def test_sweep_reverses_past_known_hits(board):
    """Ship first hit in the middle: the far end misses, so walk back the other way."""
    bot = BotLogic()
    _hit(board, bot, Coordinate(3, 4))
    _hit(board, bot, Coordinate(4, 4))
    _hit(board, bot, Coordinate(5, 4))
    _hit(board, bot, Coordinate(6, 4), ShotResult.MISS)

    assert bot.choose_shot(board) == Coordinate(2, 4)
    assert bot.last_hit_direction is Direction.LEFT
    assert bot.last_hit_position == Coordinate(3, 4)

    _hit(board, bot, Coordinate(2, 4), ShotResult.SINK)
    assert bot.mode is BotMode.HUNT


def test_sweep_reverses_at_the_board_edge(board):
    bot = BotLogic()
    _hit(board, bot, Coordinate(1, 0))
    _hit(board, bot, Coordinate(0, 0))
    assert bot.last_hit_direction is Direction.LEFT
    assert bot.choose_shot(board) == Coordinate(2, 0)
    assert bot.last_hit_direction is Direction.RIGHT


def test_sweep_closed_at_both_ends_raises(board):
    bot = BotLogic()
    _hit(board, bot, Coordinate(3, 4))
    _hit(board, bot, Coordinate(4, 4))
    board.set_result_at(Coordinate(5, 4), ShotResult.MISS)
    board.set_result_at(Coordinate(2, 4), ShotResult.MISS)
    with pytest.raises(TargetingError):
        bot.choose_shot(board)
    # The failed reversal leaves the memory as it was
    assert bot.last_hit_position == Coordinate(4, 4)
    assert bot.last_hit_direction is Direction.RIGHT


def test_misses_do_not_touch_memory(board):
    bot = BotLogic()
    _hit(board, bot, Coordinate(3, 4))
    _hit(board, bot, Coordinate(3, 5), ShotResult.MISS)
    assert bot.last_hit_position == Coordinate(3, 4)
    assert bot.last_hit_direction is None


def test_sink_resets_memory(board):
    bot = BotLogic()
    _hit(board, bot, Coordinate(3, 4))
    _hit(board, bot, Coordinate(3, 5))
    _hit(board, bot, Coordinate(3, 6), ShotResult.SINK)
    assert bot.last_hit_position is None
    assert bot.last_hit_direction is None


# ----------------------------------------------------------------------
# Whole fleet
# ----------------------------------------------------------------------


@pytest.mark.parametrize("seed", range(5))
def test_bot_sinks_a_fleet_without_repeating_shots(seed):
    rng = random.Random(seed)
    target = Board(10)
    for coord, direction, length in [
        (Coordinate(0, 0), Direction.RIGHT, 4),
        (Coordinate(9, 0), Direction.DOWN, 3),
        (Coordinate(2, 5), Direction.DOWN, 3),
        (Coordinate(5, 5), Direction.RIGHT, 2),
        (Coordinate(7, 9), Direction.UP, 1),
    ]:
        assert target.place_ship(coord, direction, length)

    shooter = Board(10)
    bot = BotLogic(rng=rng)
    fired = set()
    while not target.all_ships_sunk():
        coord = bot.choose_shot(shooter)
        assert coord not in fired
        fired.add(coord)
        result = target.fire_shot_at(coord)
        _hit(shooter, bot, coord, result)

    assert len(fired) <= 100
    assert bot.mode is BotMode.HUNT


# ----------------------------------------------------------------------
# Serialization
# ----------------------------------------------------------------------


def test_memory_round_trip(board):
    bot = BotLogic()
    _hit(board, bot, Coordinate(3, 4))
    _hit(board, bot, Coordinate(4, 4))
    restored = BotLogic.from_dict(bot.to_dict())
    assert restored.last_hit_position == Coordinate(4, 4)
    assert restored.last_hit_direction is Direction.RIGHT
    assert restored.choose_shot(board) == bot.choose_shot(board) == Coordinate(5, 4)


def test_empty_memory_round_trip():
    restored = BotLogic.from_dict(BotLogic().to_dict())
    assert restored.mode is BotMode.HUNT


@pytest.mark.parametrize(
    "data",
    [
        {"last_hit_position": None, "last_hit_direction": "UP"},
        {"last_hit_position": [1], "last_hit_direction": None},
        {"last_hit_position": [1, 2], "last_hit_direction": "NORTH"},
        {"last_hit_position": 5},
    ],
)
def test_malformed_memory_is_rejected(data):
    with pytest.raises(ValueError):
        BotLogic.from_dict(data)
