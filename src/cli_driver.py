# cli_driver.py
# This file is intended to be run to play the 2048 game on the CLI

import logging
from typing import Dict, Sequence, Tuple

from board import Board, MergeEvent
from input_driver import direction_from_key
from session import GameSession, MoveOutcomeKind, SessionStatus
from settings import settings
from stores import JsonFileHighscoreStore, JsonFileScoreStore

def main():
    logging.basicConfig(level=settings.log_level)
    size = settings.board_size

    # 1. Initialize game; the session prints the board after every resolved move
    session = GameSession(
        board=Board(size, spawn_four_probability=settings.spawn_four_probability),
        score_store=JsonFileScoreStore(settings.best_score_path),
        highscore_store=JsonFileHighscoreStore(settings.highscores_path),
        win_tile=settings.win_tile,
        renderer=lambda tiles, merges: print(render_board(tiles, size, merges)),
    )
    session.new_game()
    display_status(session)

    # 2. Game Loop
    while not session.game_over:
        move_input = input("Enter move (W/A/S/D for Up/Left/Down/Right, Q to quit): ").strip()

        if move_input.upper() == 'Q':
            print("Quitting game.")
            break

        chosen_direction = direction_from_key(move_input)
        if chosen_direction is None:
            print("Invalid input. Use W, A, S, D.")
            continue

        # 3. Process the move
        outcome = session.move(chosen_direction)

        if outcome.kind is MoveOutcomeKind.REJECTED:
            print("Move did not change the board. Try a different direction.")
            continue

        display_status(session)
        if outcome.new_best_score is not None:
            print(f"New best score: {outcome.new_best_score}")
        if outcome.won:
            print("Congratulations! You reached the 2048 tile (or configured win tile)! Keep going.")

    # 4. Game Ended
    print("\n--- Final Board State ---")
    print(render_board(session.board.tiles(), size))
    display_status(session)
    if session.game_over:
        print("No more moves possible. Better luck next time!")
        display_highscores(session)


# --- Display Functions ---

def render_board(tiles: Dict[Tuple[int, int], int], size: int, merges: Sequence[MergeEvent] = ()) -> str:
    """
    Renders a tile snapshot as text. Cells that received a merge this move are starred.
    """
    merged_cells = {(merge.row, merge.col) for merge in merges}
    lines = []
    for row in range(size):
        cells = []
        for col in range(size):
            value = tiles.get((row, col), 0)
            mark = "*" if (row, col) in merged_cells else ""
            cells.append(f"{value}{mark}")
        lines.append("\t".join(cells))
    lines.append("-" * (size * 6))  # Adjust width based on board size
    return "\n".join(lines)

def display_status(session: GameSession):
    """Prints the score and game status to the console."""
    state = session.get_state()
    print(f"Score: {state.score}\tBest: {state.best_score}")
    status_message = {
        SessionStatus.ACTIVE: f"Status: {state.status.name}",
        SessionStatus.WON: "YOU WON!",
        SessionStatus.LOST: "GAME OVER!"
    }
    print(status_message[state.status])

def display_highscores(session: GameSession):
    print("Highscores:")
    entries = session.highscore_store.get_highscores()
    if not entries:
        print("No highscores yet!")
    for rank, entry in enumerate(entries, start=1):
        print(f"#{rank}\t{entry.score} points\t{entry.date}")

if __name__ == "__main__":
    main()
