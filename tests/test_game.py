import math

import pytest

from fangclaw.entities import Collectible
from fangclaw.events import Message, SoundCue
from fangclaw.game import TUTORIAL_STEPS, FangClawGame, GameState
from fangclaw.highscore import HighScoreBook, MemoryStore


@pytest.fixture
def stub_game(stub_rng):
    game = FangClawGame(highscores=HighScoreBook(MemoryStore()), rng=stub_rng, story_pages=0)
    game.press_primary()
    return game


def place_bat_under_claw(game, color="red"):
    gx, gy = game.state.claw.grab_point()
    bat = Collectible(x=gx, y=gy, color=color)
    game.state.free = [bat]
    return bat


def test_title_story_play_flow(game):
    assert game.mode is GameState.TITLE

    game.press_primary()
    assert game.mode is GameState.STORY
    for _ in range(game.story_pages - 1):
        game.press_primary()
        assert game.mode is GameState.STORY

    game.press_primary()
    assert game.mode is GameState.PLAYING
    assert game.audio_enabled
    assert game.state.level == 1
    assert len(game.state.free) == 25


def test_zero_story_pages_skips_straight_to_play(stub_game):
    assert stub_game.mode is GameState.PLAYING


def test_update_runs_fixed_ticks(playing_game):
    assert playing_game.update(float("nan")) == 0
    assert playing_game.update(-3) == 0
    assert playing_game.update(1 / 60) == 1
    assert playing_game.update(1.0) == 5
    assert playing_game.ticks == 6


def test_clock_advances_whole_milliseconds(playing_game):
    for _ in range(60):
        playing_game.step()

    assert playing_game.clock_ms == 1000
    assert playing_game.state.time_left == 59


def test_timeout_below_target_ends_the_game(playing_game):
    playing_game.state.score = 80
    playing_game.state.time_left = 1

    for _ in range(60):
        playing_game.step()

    assert playing_game.mode is GameState.GAME_OVER
    result = playing_game.last_game_over
    assert result.final_score == playing_game.state.total_score + 80
    assert playing_game.snapshot().high_score == 80


def test_timeout_at_target_clears_the_level(playing_game):
    playing_game.state.score = 100
    playing_game.state.time_left = 1

    for _ in range(60):
        playing_game.step()

    assert playing_game.mode is GameState.TRANSITION
    assert playing_game.state.level == 2
    assert playing_game.state.total_score == 100


def test_emptying_the_pool_clears_level_and_transitions_back(stub_game):
    place_bat_under_claw(stub_game, "blue")

    stub_game.press_primary()
    stub_game.step()
    assert stub_game.state.held and not stub_game.state.claw.is_open

    stub_game.press_primary()
    stub_game.step()
    assert stub_game.mode is GameState.TRANSITION
    assert stub_game.state.level == 2
    assert stub_game.state.total_score == 15
    assert stub_game.state.required_points == 150

    ticks = 0
    while stub_game.mode is GameState.TRANSITION:
        stub_game.step()
        ticks += 1
        assert 0 <= stub_game.snapshot().transition_alpha <= 255
        assert ticks < 200
    assert stub_game.mode is GameState.PLAYING
    assert stub_game.state.time_left == 60


def test_grab_and_collect_emit_cues_and_message(stub_game):
    place_bat_under_claw(stub_game, "yellow")
    stub_game.state.free.append(Collectible(x=600, y=500))
    stub_game.drain_events()

    stub_game.press_primary()
    stub_game.step()
    stub_game.press_primary()
    stub_game.step()

    events = stub_game.drain_events()
    assert SoundCue("grab") in events
    assert SoundCue("collect") in events
    assert stub_game.message == Message(text="+20", category="success", duration_ms=1000)
    assert stub_game.state.score == 20


def test_message_hides_after_its_duration(stub_game):
    stub_game.show_message(Message(text="LOST", category="failure", duration_ms=1000))

    for _ in range(59):
        stub_game.step()
    assert stub_game.message is not None

    stub_game.step()
    assert stub_game.message is None


def test_sound_cues_wait_for_audio():
    game = FangClawGame()
    game.emit(SoundCue("grab"))
    assert game.drain_events() == []

    game.activate_audio()
    game.emit(SoundCue("grab"))
    assert game.drain_events() == [SoundCue("grab")]


def test_tutorial_advances_in_order(stub_game):
    assert stub_game.tutorial_text == TUTORIAL_STEPS[0][0]

    stub_game.set_direction(up=True)
    stub_game.step()
    assert stub_game.tutorial_step == 0

    stub_game.set_direction(right=True)
    stub_game.step()
    assert stub_game.tutorial_step == 1

    stub_game.set_direction(up=True)
    stub_game.step()
    assert stub_game.tutorial_step == 2

    stub_game.set_direction()
    place_bat_under_claw(stub_game)
    stub_game.state.free.append(Collectible(x=600, y=500))
    stub_game.press_primary()
    stub_game.step()
    assert stub_game.tutorial_step == 3

    stub_game.press_primary()
    stub_game.step()
    assert not stub_game.tutorial_active
    assert stub_game.tutorial_text is None


def test_restart_from_game_over(playing_game):
    playing_game.state.time_left = 1
    for _ in range(60):
        playing_game.step()
    assert playing_game.mode is GameState.GAME_OVER

    playing_game.press_primary()

    assert playing_game.mode is GameState.TITLE
    assert playing_game.state.level == 1
    assert playing_game.state.total_score == 0
    assert playing_game.scheduler.pending_keys() == []
    assert playing_game.last_game_over is None


def test_game_over_freezes_the_board(playing_game):
    playing_game.state.time_left = 1
    for _ in range(60):
        playing_game.step()
    positions = [(token.x, token.y) for token in playing_game.state.free]

    for _ in range(30):
        playing_game.step()

    assert [(token.x, token.y) for token in playing_game.state.free] == positions


def test_snapshot_reflects_state(stub_game):
    stub_game.state.active_powerups["SLOW_TIME"] = True

    snap = stub_game.snapshot()

    assert snap.state == "playing"
    assert snap.level == 1
    assert snap.required_points == 100
    assert len(snap.tokens) == len(stub_game.state.free)
    assert snap.active_powerups == frozenset({"SLOW_TIME"})
    assert snap.final_score == 0
    assert snap.claw.is_open
    assert math.isclose(snap.claw.effective_x, stub_game.state.claw.effective_x)


def test_held_bats_never_exceed_one_without_magnet(stub_game):
    game = stub_game
    gx, gy = game.state.claw.grab_point()
    game.state.free = [Collectible(x=gx, y=gy), Collectible(x=gx, y=gy, color="blue")]
    game.powerups.activate(game.state, "MAGNET", game.clock_ms)

    game.press_primary()
    game.step()
    assert len(game.state.held) == 2

    for _ in range(960):
        game.step()
        if not game.state.powerup_active("MAGNET"):
            assert len(game.state.held) <= 1
    assert not game.state.powerup_active("MAGNET")
    assert len(game.state.held) == 1
    assert len(game.state.free) == 1
