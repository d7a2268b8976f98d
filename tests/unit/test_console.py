"""
Unit tests for the text front end.
"""
import io
import unicodedata

import pytest
from minefield import CellState, Difficulty, GameState, GameSession, PlayConfig
from minefield.console import (
    cell_glyph,
    format_play_time,
    outcome_message,
    parse_command,
    render_board,
)


@pytest.fixture
def session() -> GameSession:
    """Session on a seeded beginner field, collecting output."""
    lines = []
    game = GameSession(PlayConfig(seed=1234), output=lines.append)
    game.printed = lines
    return game


# ============================================================================
# Rendering Tests
# ============================================================================

class TestRendering:
    """Test glyph translation and board text."""

    @pytest.mark.parametrize(
        "cell, glyph",
        [
            (CellState(), "."),
            (CellState(adjacent_mines=2).flagged(), "F"),
            (CellState(is_mine=True).opened(), "*"),
            (CellState().opened(), " "),
            (CellState(adjacent_mines=6).opened(), "6"),
        ],
    )
    def test_ascii_glyphs(self, cell: CellState, glyph: str) -> None:
        """Each cell state maps to its glyph."""
        assert cell_glyph(cell) == glyph

    def test_emoji_glyphs(self) -> None:
        """The emoji style uses flag and bomb emoji."""
        assert cell_glyph(CellState().flagged(), "emoji") == "\U0001f6a9"
        assert cell_glyph(CellState(is_mine=True).opened(), "emoji") == (
            "\U0001f4a3"
        )

    def test_render_board_has_indices(self) -> None:
        """Rendered board has a header and one line per row."""
        grid = (
            (CellState(), CellState(adjacent_mines=1).opened()),
            (CellState().flagged(), CellState().opened()),
        )
        assert render_board(grid) == "  0 1\n0 . 1\n1 F  "

    def test_emoji_digits_are_fullwidth(self) -> None:
        """Counts use fullwidth digits in the emoji style."""
        assert cell_glyph(CellState(adjacent_mines=3).opened(), "emoji") == (
            "\uff13"
        )

    @pytest.mark.parametrize("adjacent_mines", range(9))
    def test_emoji_glyphs_are_wide(self, adjacent_mines: int) -> None:
        """Every emoji-style glyph takes two terminal columns."""
        cells = [
            CellState(adjacent_mines=adjacent_mines),
            CellState(adjacent_mines=adjacent_mines).flagged(),
            CellState(adjacent_mines=adjacent_mines).opened(),
            CellState(is_mine=True).opened(),
        ]
        for cell in cells:
            glyph = cell_glyph(cell, "emoji")
            assert len(glyph) == 1
            assert unicodedata.east_asian_width(glyph) in ("W", "F")

    def test_emoji_header_matches_cell_width(self) -> None:
        """Column indices are padded to the two-column emoji width."""
        grid = (
            (CellState(), CellState(adjacent_mines=1).opened()),
            (CellState().flagged(), CellState().opened()),
        )
        header, first_row, _ = render_board(grid, "emoji").split("\n")
        assert header == "  0  1"
        assert first_row == "0 \u2b1b \uff11"

    @pytest.mark.parametrize(
        "seconds, text",
        [
            (0, "Time elapsed: 00:00:00"),
            (61, "Time elapsed: 00:01:01"),
            (3725, "Time elapsed: 01:02:05"),
        ],
    )
    def test_format_play_time(self, seconds: int, text: str) -> None:
        """Play time is shown as HH:MM:SS."""
        assert format_play_time(seconds) == text

    def test_outcome_messages(self) -> None:
        """Only terminal states have a banner."""
        assert outcome_message(GameState.PLAYING) is None
        assert "KABOOM" in outcome_message(GameState.LOST)
        assert "YOU WIN" in outcome_message(GameState.WON)


# ============================================================================
# Input Tests
# ============================================================================

class TestParseCommand:
    """Test player input parsing."""

    @pytest.mark.parametrize(
        "text, command",
        [
            ("o 1 2", ("open", (1, 2))),
            ("open 3,4", ("open", (3, 4))),
            ("F 0 7", ("flag", (0, 7))),
            ("q", ("quit", None)),
        ],
    )
    def test_valid_commands(self, text: str, command) -> None:
        """Accepted forms parse to (action, coordinate)."""
        assert parse_command(text) == command

    @pytest.mark.parametrize("text", ["", "dig 1 2", "o 1", "f a b"])
    def test_invalid_commands_raise_error(self, text: str) -> None:
        """Malformed input raises ValueError."""
        with pytest.raises(ValueError):
            parse_command(text)


# ============================================================================
# Session Tests
# ============================================================================

class TestGameSession:
    """Test the interactive session wiring."""

    def test_invalid_style_raises_error(self) -> None:
        """Unknown glyph styles are rejected."""
        with pytest.raises(ValueError, match="glyph style"):
            PlayConfig(style="neon")

    def test_execute_flag_marks_redraw(self, session: GameSession) -> None:
        """Grid changes mark the board for redraw."""
        session.render()
        assert session.needs_redraw is False
        assert session.execute(("flag", (0, 0))) is True
        assert session.needs_redraw is True

    def test_ticks_update_time_label(self, session: GameSession) -> None:
        """Posted ticks apply before the next command."""
        session.dispatcher.post(session.clock.tick)
        session.dispatcher.post(session.clock.tick)
        session.execute(("flag", (0, 0)))
        assert session.engine.play_time.value == 2
        assert session.time_label == "Time elapsed: 00:00:02"

    def test_loss_shows_banner_and_stops_clock(
        self, session: GameSession
    ) -> None:
        """Opening a mine ends the session with the loss banner."""
        row, col = sorted(session.engine.mine_positions)[0]
        state = session.play([f"o {row} {col}", "o 0 0"])
        assert state == GameState.LOST
        assert session.clock.running is False
        assert "KABOOM" in session.printed[-1]

    def test_win_through_commands(self, session: GameSession) -> None:
        """Flagging every mine wins."""
        commands = [f"f {row} {col}" for row, col in session.engine.mine_positions]
        assert session.play(commands) == GameState.WON
        assert "YOU WIN" in session.render()

    def test_bad_input_is_reported(self, session: GameSession) -> None:
        """Parse and bounds errors are printed, not raised."""
        state = session.play(["nonsense", "o 99 0", "quit"])
        assert state == GameState.PLAYING
        assert any("Unknown command" in line for line in session.printed)
        assert any("outside" in line for line in session.printed)

    def test_new_difficulty_builds_new_engine(self) -> None:
        """Each session owns a fresh engine for its difficulty."""
        game = GameSession(
            PlayConfig(difficulty=Difficulty.EXPERT), output=lambda text: None
        )
        assert game.engine.dimension == 32

    def test_prompt_shown_before_first_command(
        self, session: GameSession
    ) -> None:
        """The prompt is written once up front and after each command."""
        prompt = io.StringIO()
        session.play([], prompt=prompt)
        assert prompt.getvalue() == "> "

        prompt = io.StringIO()
        game = GameSession(PlayConfig(seed=1234), output=lambda text: None)
        game.play(["nonsense", "quit"], prompt=prompt)
        assert prompt.getvalue() == "> > "

    def test_clock_thread_finished_after_play(self) -> None:
        """Play returns only after the clock thread has exited."""
        game = GameSession(
            PlayConfig(seed=1234, tick_interval=0.05), output=lambda text: None
        )
        game.play(["quit"])
        assert game.clock.running is False
        assert game.clock.alive is False
