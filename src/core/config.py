# config.py
import os

# General
FPS = 60

# Screen Dimensions
EDITOR_WIDTH = 1000
EDITOR_HEIGHT = 800

# Tile Configuration
# Size of one tile inside the tileset image
TILE_SOURCE_SIZE = 96
# Nominal size of a grid cell on screen before scaling
TILE_OUTPUT_SIZE = 40
# Grid used for a fresh level
DEFAULT_GRID_WIDTH = 16
DEFAULT_GRID_HEIGHT = 12
MIN_SCALE_FACTOR = 0.5
MAX_SCALE_FACTOR = 1.5

# Palette strip reserved along the bottom of the viewport
PALETTE_STRIP_HEIGHT = 100
PALETTE_TILE_SIZE = 36
PALETTE_TILE_MARGIN = 4
PALETTE_PADDING = 10
# Width kept free on the right of the strip for layer and action buttons
PALETTE_BUTTON_AREA_WIDTH = 490
STRIP_BUTTON_WIDTH = 120
STRIP_BUTTON_GAP = 10
LAYER_BUTTON_HEIGHT = 36
ACTION_BUTTON_HEIGHT = 30

# Reserved tile ids
EMPTY_TILE_ID = 0
GOAL_TILE_ID = 10
PLAYER_TILE_ID = 88
BOX_TILE_ID = 94

# Placeable tiles per layer, in palette order
TERRAIN_PALETTE = (
    EMPTY_TILE_ID, 11, 12, 13, 14, 15, 16, 21, 26, 31, 36, 41, 46,
    57, 59, 61, 62, 63, 64, 65, 66, 67, 68, 90,
)
GOALS_PALETTE = (EMPTY_TILE_ID, GOAL_TILE_ID)
ENTITIES_PALETTE = (EMPTY_TILE_ID, BOX_TILE_ID, PLAYER_TILE_ID)

# Map document metadata (Tiled JSON map format)
MAP_ORIENTATION = "orthogonal"
MAP_RENDER_ORDER = "right-down"
MAP_FORMAT_VERSION = "1.10"
TILED_VERSION = "1.10.2"
TILESET_SOURCE = "tileset_96x96px.tsx"
MAX_MAP_DIMENSION = 256

# Persistence
CUSTOM_LEVELS_KEY = "sokoban_custom_levels"
AUTHOR_NAME_KEY = "sokoban_author_name"
DEFAULT_AUTHOR_NAME = "Unknown"
DEFAULT_LEVEL_NAME = "My Custom Level"

# Directory Paths (relative to project root)
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
DATA_DIR = os.path.join(PROJECT_ROOT, "data")
ASSET_DIR = os.path.join(PROJECT_ROOT, "assets")
STORAGE_PATH = os.path.join(DATA_DIR, "storage.json")
TILESET_IMAGE_PATH = os.path.join(ASSET_DIR, "tileset_96x96px.png")
TRIAL_LEVEL_PATH = os.path.join(DATA_DIR, "trial_level.json")
# Columns used for generated placeholder sheets when the tileset image is missing
PLACEHOLDER_TILES_PER_ROW = 10

# Module launched with the trial level path as its only argument; None keeps the document on disk only
GAMEPLAY_MODULE = None

# UI Elements Fonts (Using None uses default pygame font)
DEFAULT_FONT = None # Pygame default
HUD_FONT_SIZE = 18
PALETTE_FONT_SIZE = 12
BUTTON_FONT_SIZE = 18
DIALOG_FONT_SIZE = 22

# Colors (Define common colors here)
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
RED = (255, 0, 0)
YELLOW = (255, 255, 0)
GRAY_LIGHT = (200, 200, 200)
GRAY_MEDIUM = (100, 100, 100)
GRAY_DARK = (51, 51, 51)

EDITOR_BG_COLOR = GRAY_DARK
GRID_LINE_COLOR = (255, 255, 255, 77)
ACTIVE_LAYER_TINT = (255, 255, 0, 51)
STRIP_BG_COLOR = (0, 0, 0, 178)
PALETTE_CELL_COLOR = (0, 0, 0, 128)
PALETTE_SELECTED_COLOR = (255, 255, 255, 77)
SELECTION_HIGHLIGHT_COLOR = RED
BUTTON_COLOR = (100, 100, 100)
BUTTON_ACTIVE_COLOR = (0, 100, 255)
ACTION_BUTTON_COLOR = (50, 50, 50)
BUTTON_HOVER_COLOR = (140, 140, 140)
DIALOG_OVERLAY_COLOR = (0, 0, 0, 180)
