"""
Game constants for the ladder game.
Tile ids are 1-based; tile 1 is the start of the path.
"""

# Board
BOARD_SIZE = 90
START_TILE_ID = 1
WINNING_TILE_ID = 90

# Dice
DIE_FACES = 6

# Players
MIN_PLAYERS = 2
MAX_PLAYERS = 5
PLAYER_TOKENS = ["blue", "light_blue", "red", "green", "pink"]

# Reroute directions
DIRECTION_UP = "up"
DIRECTION_DOWN = "down"
DIRECTION_START = "start"

# Variant names
CLASSIC_VARIANT = "ladder_classic"
ADVANCED_VARIANT = "ladder_advanced"
EXTREME_VARIANT = "ladder_extreme"

# Tile layouts
# Ladders are (tile_id, destination_tile_id); the direction follows from the ids.
# Every variant also gets the COMMON_* layout.
COMMON_LADDERS = [
    (25, 7), (38, 1), (48, 13), (70, 30), (79, 27), (89, 53),
]
COMMON_WAIT_TILES = [37, 54, 71]
COMMON_BACK_TO_START_TILES = [10, 81]

VARIANT_LAYOUTS = {
    CLASSIC_VARIANT: {
        "display_name": "Ladder Game Classic",
        "ladders": [
            (5, 17), (12, 49), (21, 41), (43, 61), (55, 87), (65, 84),
        ],
        "wait_tiles": [],
        "back_to_start_tiles": [],
    },
    ADVANCED_VARIANT: {
        "display_name": "Ladder Game Advanced",
        "ladders": [
            (5, 17), (12, 49), (14, 47), (21, 41), (43, 61), (52, 72), (65, 84),
            (42, 2), (46, 15), (64, 24),
        ],
        "wait_tiles": [18, 28, 45, 58, 75, 88],
        "back_to_start_tiles": [34, 56, 68],
    },
    EXTREME_VARIANT: {
        "display_name": "Ladder Game Extreme",
        "ladders": [
            (17, 5), (41, 21), (42, 2), (46, 15), (47, 14), (49, 12),
            (61, 43), (64, 24), (72, 52), (82, 63), (84, 65), (87, 55),
        ],
        "wait_tiles": [18, 28, 45, 58, 75, 88],
        "back_to_start_tiles": [34, 56, 68],
    },
}
