"""Board, cells and rules for a game of tic tac toe"""

from tic_tac_toe.board import LINES, Board
from tic_tac_toe.cell import Cell, CellIndex
from tic_tac_toe.snapshot import Snapshot
from tic_tac_toe.state import GameState, Outcome, OutcomeKind
