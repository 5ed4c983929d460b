from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Strong references so systems that are not stored in a variable keep receiving events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float (seconds)


# ============================================================================
# SWAPS
# ============================================================================
EVENT_SWAP_REQUEST = "swap_request"                # payload: src=(r,c), dst=(r,c)
EVENT_SWAP_ACCEPTED = "swap_accepted"              # payload: src=(r,c), dst=(r,c), combo=bool
EVENT_SWAP_REJECTED = "swap_rejected"              # payload: src=(r,c), dst=(r,c), reason=str
EVENT_SWAP_REVERTED = "swap_reverted"              # payload: src=(r,c), dst=(r,c)


# ============================================================================
# CASCADE
# ============================================================================
EVENT_COMBO_TRIGGERED = "combo_triggered"          # payload: combo=ComboResult
EVENT_MATCH_FOUND = "match_found"                  # payload: result=MatchResult, positions=[(r,c),...], depth=int
EVENT_MATCH_CLEARED = "match_cleared"              # payload: report=RoundReport
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: board=Board
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tiles=[(r,c),...]
EVENT_CASCADE_STEP = "cascade_step"                # payload: depth=int, positions=[(r,c),...]
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int, has_valid_move=bool
EVENT_BOARD_RESHUFFLED = "board_reshuffled"        # payload: reason=str


# ============================================================================
# ANIMATION
# ============================================================================
EVENT_ANIMATION_START = "animation_start"          # payload: kind=str, items=list
EVENT_ANIMATION_COMPLETE = "animation_complete"    # payload: kind=str


# ============================================================================
# SESSION & OBJECTIVES
# ============================================================================
EVENT_SCORE_CHANGED = "score_changed"              # payload: score=int, delta=int
EVENT_MOVES_CHANGED = "moves_changed"              # payload: moves_remaining=int
EVENT_OBJECTIVE_PROGRESS = "objective_progress"    # payload: progress=list[ObjectiveProgress], all_complete=bool
EVENT_NO_MOVES = "no_moves"                        # payload: None
EVENT_LEVEL_COMPLETE = "level_complete"            # payload: score=int, moves_remaining=int|None
EVENT_GAME_OVER = "game_over"                      # payload: score=int, reason=str
