GRID_ROWS = 8
GRID_COLS = 8

# Token palette. Order matters for seeded boards: draws index into this list.
COLORS = [
    'red',
    'green',
    'blue',
    'yellow',
    'magenta',
    'orange',
]

# Session defaults
DEFAULT_MOVES = 20
DEFAULT_TIME_LIMIT = 60.0  # seconds, arcade mode only

# Minimum run length that counts as a match.
MIN_MATCH_LENGTH = 3
# Run length that creates a row/column clear token.
ROCKET_RUN_LENGTH = 4
# Run length that creates a color clear token.
RAINBOW_RUN_LENGTH = 5

# ============================================================================
# SCORING
# ============================================================================
SCORE_PER_CELL = 10
SCORE_PER_EXTRA_CELL = 15           # per cell beyond MIN_MATCH_LENGTH
SCORE_ROCKET_ACTIVATION = 50
SCORE_RAINBOW_ACTIVATION = 100
SCORE_BOMB_ACTIVATION = 75
SCORE_PROPELLER_ACTIVATION = 60
COMBO_MULTIPLIER_STEP = 0.5         # multiplier = 1 + combo_count * step
FUSION_BASE_SCORE = 200
FUSION_SCORE_PER_CELL = 15

# ============================================================================
# AREAS
# ============================================================================
BOMB_RADIUS = 1           # 3x3
BIG_BOMB_RADIUS = 2       # 5x5, bomb+bomb and propeller+bomb fusions
PROPELLER_RADIUS = 1      # 3x3 around the strike target
FUSION_PROPELLER_COUNT = 3

# Homing strike tie-break: prefer targets further down the board.
PROPELLER_ROW_BONUS = 0.1

# Initial special token seeding per difficulty: (rockets, propellers)
DIFFICULTY_SEEDING = {
    'easy': (4, 2),
    'medium': (0, 0),
}
