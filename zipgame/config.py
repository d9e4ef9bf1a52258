"""Central configuration: difficulty presets, generator budgets, service settings."""
import os

# ── Board ─────────────────────────────────────────────────────────────────────
MIN_BOARD_SIZE = 2
MAX_BOARD_SIZE = 12

# ── Difficulty presets ────────────────────────────────────────────────────────
DEFAULT_DIFFICULTY = "medium"

DIFFICULTY_PRESETS: dict[str, dict] = {
    "easy":              {"default_board_size": 6, "min_waypoints": 4,  "max_waypoints": 6,  "path_complexity": 0.3},
    "medium":            {"default_board_size": 6, "min_waypoints": 6,  "max_waypoints": 8,  "path_complexity": 0.5},
    "hard":              {"default_board_size": 7, "min_waypoints": 8,  "max_waypoints": 10, "path_complexity": 0.7},
    "extra-hard":        {"default_board_size": 8, "min_waypoints": 10, "max_waypoints": 12, "path_complexity": 0.8},
    "almost-impossible": {"default_board_size": 9, "min_waypoints": 12, "max_waypoints": 15, "path_complexity": 0.95},
}

DIFFICULTY_NAMES: dict[str, str] = {
    "easy":              "Easy",
    "medium":            "Medium",
    "hard":              "Hard",
    "extra-hard":        "Extra Hard",
    "almost-impossible": "Almost Impossible!",
}

# ── Path generation ───────────────────────────────────────────────────────────
# Boards at or above this size skip the backtracking search entirely.
SEARCH_SKIP_SIZE = 10
# Boards at or above this size get several short random-start attempts.
SEARCH_SHORT_SIZE = 8
SEARCH_SHORT_ATTEMPTS = 3
SEARCH_SHORT_BUDGET_MS = 300
SEARCH_FULL_BUDGET_MS = 1000

MIXED_DETOUR_CHANCE = 0.2
MIXED_DETOUR_MAX = 2          # moves per detour (1..MIXED_DETOUR_MAX)
MIXED_TAIL_GUARD = 5          # no detours in the final cells of the base path
RANDOM_WALK_MOVE_FACTOR = 50  # backbite budget = factor × cells

# ── Waypoint placement ────────────────────────────────────────────────────────
CELLS_PER_WAYPOINT = 6
BOARD_MIN_WAYPOINTS = 4
BOARD_MIN_WAYPOINT_RATIO = 0.8
BOARD_MAX_WAYPOINT_RATIO = 1.5

HIGH_COMPLEXITY_THRESHOLD = 0.6
HIGH_COMPLEXITY_JITTER = 0.6
LOW_COMPLEXITY_JITTER = 0.3
# Waypoints (except the last) keep this far from the path end when room allows
HIGH_COMPLEXITY_TAIL_MARGIN = 20
LOW_COMPLEXITY_TAIL_MARGIN = 10

SEQUENTIAL_STDDEV_RATIO = 0.2
PLACEMENT_MAX_ATTEMPTS = 10

# ── Interaction ───────────────────────────────────────────────────────────────
BACKTRACK_MIN_STEPS = 3
BACKTRACK_PATH_RATIO = 0.2
HINT_ROUTE_CELLS = 3

# ── Game store / scheduler ────────────────────────────────────────────────────
GAME_IDLE_TTL_MIN = int(os.environ.get("ZIPGAME_IDLE_TTL_MIN", "120"))
PRUNE_INTERVAL_MIN = int(os.environ.get("ZIPGAME_PRUNE_INTERVAL_MIN", "10"))
WS_KEEPALIVE_S = 60.0

# ── HTTP ──────────────────────────────────────────────────────────────────────
CORS_ORIGINS = os.environ.get("ZIPGAME_CORS_ORIGINS", "http://localhost:5173").split(",")
