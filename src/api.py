import logging
import uuid
from collections import OrderedDict
from typing import List, Optional, Tuple

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from pydantic import BaseModel, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from board import Board, Direction
from session import GameSession, MoveOutcome, MoveOutcomeKind, SessionStatus
from settings import settings
from stores import (
    HighscoreStore,
    JsonFileHighscoreStore,
    JsonFileScoreStore,
    ScoreStore,
)

logger = logging.getLogger(__name__)

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="2048 Game API",
    description="An API for playing the 2048 game. "\
                "Games live on the server and are addressed by the id returned from /game/new.",
    version="1.0.0"
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# --- Game registry ---

class GameNotFoundError(KeyError):
    """Raised when a game id does not match any running game."""

class GameRegistry:
    """
    Running games keyed by id. All games share the same score and highscore stores.
    At most `max_games` are kept; creating one more drops the least recently used game.
    """

    def __init__(self, score_store: ScoreStore, highscore_store: HighscoreStore,
                 board_size: int = 4, win_tile: int = 2048, spawn_four_probability: float = 0.1,
                 max_games: int = 1000):
        if max_games <= 0:
            raise ValueError("max_games must be a positive integer.")
        self.score_store = score_store
        self.highscore_store = highscore_store
        self.board_size = board_size
        self.win_tile = win_tile
        self.spawn_four_probability = spawn_four_probability
        self.max_games = max_games
        self._games: "OrderedDict[str, GameSession]" = OrderedDict()

    def create(self, animate: bool = False) -> Tuple[str, GameSession]:
        game_id = uuid.uuid4().hex
        session = GameSession(
            board=Board(self.board_size, spawn_four_probability=self.spawn_four_probability),
            score_store=self.score_store,
            highscore_store=self.highscore_store,
            win_tile=self.win_tile,
            auto_release=not animate,
        )
        session.new_game()
        self._games[game_id] = session
        while len(self._games) > self.max_games:
            evicted, _ = self._games.popitem(last=False)
            logger.info("Evicted game %s", evicted)
        logger.info("Created game %s", game_id)
        return game_id, session

    def get(self, game_id: str) -> GameSession:
        try:
            session = self._games[game_id]
        except KeyError:
            raise GameNotFoundError(game_id) from None
        self._games.move_to_end(game_id)
        return session

    def remove(self, game_id: str) -> None:
        try:
            del self._games[game_id]
        except KeyError:
            raise GameNotFoundError(game_id) from None
        logger.info("Removed game %s", game_id)

    def __len__(self) -> int:
        return len(self._games)

    def __contains__(self, game_id: str) -> bool:
        return game_id in self._games

registry = GameRegistry(
    JsonFileScoreStore(settings.best_score_path),
    JsonFileHighscoreStore(settings.highscores_path),
    board_size=settings.board_size,
    win_tile=settings.win_tile,
    spawn_four_probability=settings.spawn_four_probability,
    max_games=settings.max_games,
)

def get_registry() -> GameRegistry:
    return registry

# --- Pydantic Models for API requests and responses ---

class NewGameSettings(BaseModel):
    """Settings for creating a new game."""
    animate: bool = Field(
        default=False,
        description="If true, each move must be followed by /animation-complete before the next is accepted."
    )

class GameStateData(BaseModel):
    """Represents the complete state of a game instance."""
    game_id: str = Field(..., description="Id of the game, used in every other /game endpoint.")
    board: List[List[int]] = Field(..., description="The N x N game board, represented as a list of lists.")
    score: int = Field(..., ge=0, description="Current score of the game.")
    best_score: int = Field(..., ge=0, description="Best score recorded across all games.")
    status: SessionStatus = Field(..., description="Current progress state of the game (active, won, lost).")
    game_over: bool = Field(..., description="True when no move can change the board.")
    win_tile: int = Field(..., gt=0, description="The tile value required to win this game instance.")
    board_size: int = Field(..., gt=0, description="The dimension N of the N x N board.")

class MoveRequestData(BaseModel):
    """Data required to make a move."""
    direction: Direction = Field(..., description="Direction of the move (up, down, left, right).")

class MergeEventData(BaseModel):
    row: int
    col: int
    value: int

class SpawnedTileData(BaseModel):
    row: int
    col: int
    value: int

class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and what the move did."""
    outcome: MoveOutcomeKind = Field(..., description="moved, rejected (nothing moved) or ignored (busy).")
    merges: List[MergeEventData] = Field(default_factory=list, description="Merges in the order they happened.")
    spawned: Optional[SpawnedTileData] = Field(default=None, description="The tile added after the move.")
    won: bool = Field(default=False, description="True on the move that first reached the win tile.")
    lost: bool = Field(default=False, description="True on the move that left no moves available.")
    new_best_score: Optional[int] = Field(default=None, description="Set when this move raised the best score.")
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was invalid, game ended, or other info."
    )

class HighscoreData(BaseModel):
    rank: int
    score: int
    date: str

def _state_data(game_id: str, session: GameSession) -> dict:
    state = session.get_state()
    return dict(
        game_id=game_id,
        board=state.grid,
        score=state.score,
        best_score=state.best_score,
        status=state.status,
        game_over=state.game_over,
        win_tile=session.win_tile,
        board_size=session.board.size,
    )

def _outcome_message(outcome: MoveOutcome) -> Optional[str]:
    if outcome.kind is MoveOutcomeKind.IGNORED:
        return "Move ignored; the previous move is still being resolved."
    if outcome.kind is MoveOutcomeKind.REJECTED:
        return "Move was not effective; board state unchanged by slide."
    if outcome.won:
        return "Congratulations! You won!"
    if outcome.lost:
        return "Game Over. No more valid moves."
    return None

def _lookup(games: GameRegistry, game_id: str) -> GameSession:
    try:
        return games.get(game_id)
    except GameNotFoundError:
        raise HTTPException(status_code=404, detail=f"Game not found: {game_id}")

# --- API Endpoints ---

@app.post("/game/new", response_model=GameStateData, summary="Start a New 2048 Game")
@limiter.limit(settings.rate_limit)
async def start_new_game(request: Request, new_game: Optional[NewGameSettings] = None,
                         games: GameRegistry = Depends(get_registry)):
    """
    Starts a new game on the server.

    - **animate**: if true, the game stays busy after each move until
      `/game/{game_id}/animation-complete` is called.

    Returns the initial game state: a board with two random tiles, score 0
    and status `active`.
    """
    animate = new_game.animate if new_game is not None else False
    try:
        game_id, session = games.create(animate=animate)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return GameStateData(**_state_data(game_id, session))


@app.get("/game/{game_id}", response_model=GameStateData, summary="Get the State of a Game")
@limiter.limit(settings.rate_limit)
async def get_game(request: Request, game_id: str, games: GameRegistry = Depends(get_registry)):
    session = _lookup(games, game_id)
    return GameStateData(**_state_data(game_id, session))


@app.post("/game/{game_id}/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit(settings.rate_limit)
async def make_move(request: Request, game_id: str, request_data: MoveRequestData,
                    games: GameRegistry = Depends(get_registry)):
    """
    Processes a player's move in the game.

    The server will:
    1. Ignore the move if the previous one is still being animated.
    2. Slide and merge the tiles. If nothing moved the move is rejected.
    3. Add a new random tile (2 or 4).
    4. Update the score, best score and game status.

    Returns the updated game state together with what the move did.
    """
    session = _lookup(games, game_id)
    outcome = session.move(request_data.direction)
    return MoveResponseData(
        **_state_data(game_id, session),
        outcome=outcome.kind,
        merges=[MergeEventData(row=m.row, col=m.col, value=m.value) for m in outcome.merges],
        spawned=SpawnedTileData(row=outcome.spawned[0], col=outcome.spawned[1], value=outcome.spawned[2])
        if outcome.spawned is not None else None,
        won=outcome.won,
        lost=outcome.lost,
        new_best_score=outcome.new_best_score,
        message=_outcome_message(outcome),
    )


@app.post("/game/{game_id}/animation-complete", response_model=GameStateData,
          summary="Accept Moves Again After an Animation")
@limiter.limit(settings.rate_limit)
async def animation_complete(request: Request, game_id: str, games: GameRegistry = Depends(get_registry)):
    session = _lookup(games, game_id)
    session.animation_complete()
    return GameStateData(**_state_data(game_id, session))


@app.delete("/game/{game_id}", status_code=204, summary="End and Discard a Game")
@limiter.limit(settings.rate_limit)
async def delete_game(request: Request, game_id: str, games: GameRegistry = Depends(get_registry)):
    try:
        games.remove(game_id)
    except GameNotFoundError:
        raise HTTPException(status_code=404, detail=f"Game not found: {game_id}")
    return Response(status_code=204)


@app.get("/highscores", response_model=List[HighscoreData], summary="Top 10 Scores")
@limiter.limit(settings.rate_limit)
async def get_highscores(request: Request, games: GameRegistry = Depends(get_registry)):
    return [
        HighscoreData(rank=rank, score=entry.score, date=entry.date)
        for rank, entry in enumerate(games.highscore_store.get_highscores(), start=1)
    ]


def run(host: str = "127.0.0.1", port: int = 8000):
    import uvicorn

    logging.basicConfig(level=settings.log_level)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
