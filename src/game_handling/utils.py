"""Helpers shared by the local and remote game handlers"""

from tic_tac_toe import GameState, OutcomeKind

GAME_OVER_PROMPT = "Press SPACE to PLAY AGAIN Press ESC to EXIT"


def status_line(game_state: GameState) -> str:
    """Short text describing whose turn it is or how the game ended"""

    outcome = game_state.outcome
    match outcome.kind:
        case OutcomeKind.IN_PROGRESS:
            return f"Player {game_state.active_mark.value}'s turn"
        case OutcomeKind.WON:
            return f"Player {outcome.winner.value} wins!"
        case OutcomeKind.DRAW:
            return "It's a draw!"
