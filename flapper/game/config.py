# --- Display ---
WIDTH = 400
HEIGHT = 600
FPS = 60
GROUND_HEIGHT = 100         # ground band at the bottom of the viewport

# --- World / Physics (per tick, before the speed multiplier) ---
BASE_GRAVITY = 0.2          # px/tick^2, positive = down
BASE_FLAP_IMPULSE = -3.25   # px/tick, negative = up
BASE_SCROLL_SPEED = 2.0     # px/tick the world moves left
MAX_SPEED_MULTIPLIER = 1.8
SPEED_STEP_SCORE = 10       # multiplier steps up every N points
SPEED_STEP = 0.03
MAX_VY = 12.0               # only used to normalise observations

# --- Actor ---
ACTOR_X = 80                # actor's fixed x (world scrolls left)
ACTOR_W = 30
ACTOR_H = 25
ROTATION_FACTOR = 3.0
ROTATION_MIN = -30.0
ROTATION_MAX = 90.0

# --- Obstacle generation ---
PIPE_WIDTH = 60
PIPE_SPACING = 200          # px of travel between two spawns
MIN_HEIGHT = 50             # top/bottom margin kept around every gap
GAP_MIN = 95
GAP_MAX = 350
MAX_CENTER_SHIFT = 120      # px between consecutive gap centers
CENTER_SHIFT_RATIO = 0.6    # ... or this share of the safe zone, whichever is smaller
FIRST_OBSTACLE_DELAY_TICKS = 60  # ~1s at FPS

# (max score inclusive, base_gap, gap_variance); last row covers everything above
GAP_BANDS = (
    # wide
    (5, 220.0, 60.0),
    (10, 205.0, 55.0),
    (15, 190.0, 50.0),
    (20, 180.0, 45.0),
    (25, 170.0, 40.0),
    # medium
    (35, 160.0, 35.0),
    (45, 150.0, 30.0),
    (52, 140.0, 25.0),
    (60, 132.0, 22.0),
    # narrow
    (75, 125.0, 18.0),
    (90, 118.0, 15.0),
    (110, 112.0, 12.0),
    (140, 106.0, 10.0),
    (None, 100.0, 8.0),
)

# (score below, share of the play band eligible for gap centers)
PLACEMENT_BANDS = (
    (5, 0.3),
    (10, 0.5),
    (20, 0.7),
    (None, 1.0),
)

# --- Autopilot ---
CHEAT_CODE = "butter"
AUTOPILOT_OBSTACLES = 15
AUTOPILOT_CEILING_MARGIN = 30   # px from the top: never flap
AUTOPILOT_GROUND_MARGIN = 40    # px above the ground: always flap
AUTOPILOT_BUFFER_ZONE = 15      # px below the target before flapping

# --- Storage ---
LEADERBOARD_KEY = "flapper.leaderboard"
HIGH_SCORE_KEY = "flapper.high_score"
LEADERBOARD_LIMIT = 100
STORE_PATH_DEFAULT = "flapper_scores.json"
SEED_DEFAULT = 12345

# --- Colors (RGB) ---
COLOR_SKY = (135, 206, 235)
COLOR_GROUND = (139, 69, 19)
COLOR_GRASS = (34, 139, 34)
COLOR_PIPE = (50, 205, 50)
COLOR_PIPE_EDGE = (0, 100, 0)
COLOR_ACTOR = (255, 215, 0)
COLOR_AUTOPILOT = (120, 200, 255)
COLOR_DANGER = (255, 86, 110)
COLOR_FG = (255, 255, 255)
