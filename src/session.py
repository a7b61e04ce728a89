# session.py
# This file holds the game session: score, win/loss status and the busy guard around board moves.

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple
import logging
import random

from board import Board, Direction, MergeEvent, WIN_TILE
from stores import HighscoreStore, InMemoryHighscoreStore, InMemoryScoreStore, ScoreStore

logger = logging.getLogger(__name__)

Renderer = Callable[[Dict[Tuple[int, int], int], List[MergeEvent]], None]

class SessionStatus(Enum):
    """Represents the current progress state of the game."""
    ACTIVE = "active"
    WON = "won"  # Sticky, play may continue
    LOST = "lost"

class MoveOutcomeKind(Enum):
    IGNORED = "ignored"    # A previous move is still being resolved
    REJECTED = "rejected"  # No tile could move
    MOVED = "moved"

@dataclass
class MoveOutcome:
    """What happened when a move was requested."""
    kind: MoveOutcomeKind
    score: int
    status: SessionStatus
    merges: List[MergeEvent] = field(default_factory=list)
    spawned: Optional[Tuple[int, int, int]] = None
    won: bool = False
    lost: bool = False
    new_best_score: Optional[int] = None

    @property
    def moved(self) -> bool:
        return self.kind is MoveOutcomeKind.MOVED

@dataclass
class GameState:
    grid: List[List[int]]
    score: int
    best_score: int
    status: SessionStatus
    game_over: bool = False


def _today() -> str:
    return date.today().isoformat()


class GameSession:
    """
    A single game of 2048 played on one Board.

    Moves are serialized by a busy flag. With `auto_release` the flag is cleared as
    soon as the move is resolved; otherwise the caller clears it through
    `animation_complete()` once its presentation of the move has finished.
    """

    def __init__(self, board: Optional[Board] = None, rng: Optional[random.Random] = None,
                 score_store: Optional[ScoreStore] = None,
                 highscore_store: Optional[HighscoreStore] = None,
                 win_tile: int = WIN_TILE, renderer: Optional[Renderer] = None,
                 auto_release: bool = True, today: Callable[[], str] = _today):
        if board is not None and rng is not None:
            raise ValueError("Pass rng to the Board, not the session, when supplying a board.")
        self.board = board if board is not None else Board(rng=rng)
        self.score_store = score_store if score_store is not None else InMemoryScoreStore()
        self.highscore_store = highscore_store if highscore_store is not None else InMemoryHighscoreStore()
        self.win_tile = win_tile
        self.renderer = renderer
        self.auto_release = auto_release
        self.today = today
        self.score = 0
        self.status = SessionStatus.ACTIVE
        self._busy = False

    @property
    def busy(self) -> bool:
        """True while a move is being resolved."""
        return self._busy

    def new_game(self) -> GameState:
        """Resets the board, score and status, then spawns the two starting tiles."""
        self.board.reset()
        self.score = 0
        self.status = SessionStatus.ACTIVE
        self._busy = False
        self.board.spawn_tile()
        self.board.spawn_tile()
        logger.info("New game started")
        self._render([])
        return self.get_state()

    def animation_complete(self) -> None:
        """Releases the busy guard so the next move is accepted."""
        self._busy = False

    def move(self, direction: Direction) -> MoveOutcome:
        """
        Applies a move and settles score, spawning and status around it.
        Args:
            direction (Direction): The direction to move.
        Returns:
            MoveOutcome: IGNORED while busy, REJECTED when nothing moved, MOVED otherwise.
        """
        if self._busy:
            logger.debug("Ignoring %s: move in progress", direction.value)
            return MoveOutcome(MoveOutcomeKind.IGNORED, self.score, self.status)

        result = self.board.apply_move(direction)
        if not result.changed:
            return MoveOutcome(MoveOutcomeKind.REJECTED, self.score, self.status)

        self._busy = True
        outcome = MoveOutcome(MoveOutcomeKind.MOVED, self.score, self.status, merges=result.merges)

        self.score += sum(merge.value for merge in result.merges)
        if self.score > self.score_store.get_best_score():
            self.score_store.set_best_score(self.score)
            outcome.new_best_score = self.score
            logger.info("New best score: %d", self.score)

        outcome.spawned = self.board.spawn_tile()

        # Lost is checked even if no tile could be spawned.
        if self.status is not SessionStatus.WON and self.board.max_value() >= self.win_tile:
            self.status = SessionStatus.WON
            outcome.won = True
            logger.info("Game won with score %d", self.score)
        elif not self.board.moves_available():
            # A won game that runs out of moves stays WON.
            if self.status is SessionStatus.ACTIVE:
                self.status = SessionStatus.LOST
            outcome.lost = True
            self.highscore_store.record_score(self.score, self.today())
            logger.info("Game over with score %d", self.score)

        outcome.score = self.score
        outcome.status = self.status
        logger.debug("Moved %s: %d merges, score %d", direction.value, len(result.merges), self.score)

        self._render(result.merges)
        if self.auto_release:
            self._busy = False
        return outcome

    @property
    def game_over(self) -> bool:
        return not self.board.moves_available()

    def get_state(self) -> GameState:
        return GameState(
            grid=self.board.grid,
            score=self.score,
            best_score=self.score_store.get_best_score(),
            status=self.status,
            game_over=self.game_over,
        )

    def _render(self, merges: List[MergeEvent]) -> None:
        if self.renderer is not None:
            self.renderer(self.board.tiles(), merges)
