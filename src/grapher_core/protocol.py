"""3D Grapher pack constants.

Single source of truth for names, layouts and timings shared by the compiler,
the scoreboard machine and the verifier. Keep compiler and verifier in sync.
"""

PACK_FORMAT = 7
PACK_DESCRIPTION = "Animated 3D Grapher for Minecraft"

DEFAULT_NAMESPACE = "3d-grapher"
DEFAULT_INTERNAL_NAMESPACE = "zzz_internal"
DEFAULT_OBJECTIVE = "3d_grapher"
DEFAULT_MARKER_TAG = "3dGrapher.marker"

# Public registers (fake players on the objective)
FRAME_REGISTER = "frame"
PAN_X_REGISTER = "panX"
PAN_Z_REGISTER = "panZ"

# Allocated register name prefixes
SCRATCH_PREFIX = "$r"
CONSTANT_PREFIX = "$c"

# Scoreboards hold signed 32-bit integers
DEFAULT_REGISTER_WIDTH = 32

# Entity position NBT axes
AXIS_X = 0
AXIS_Y = 1
AXIS_Z = 2

# Marker cosmetics
MARKER_ENTITY = "minecraft:armor_stand"
MARKER_NBT = "{Invisible:1b,Marker:1b,NoGravity:1b,Small:1b}"
HEAD_SLOT = "ArmorItems[3]"
ITEM_ON = "minecraft:cyan_concrete"
ITEM_OFF = "minecraft:cyan_stained_glass"
POWER_ON_SOUND = "minecraft:block.beacon.activate"
POWER_ON_VOLUME = 1
POWER_ON_PITCH = 0.7

# Flicker sequence after turn_on: (ticks until off, ticks until back on)
FLICKER_DURATIONS = ((10, 1), (10, 1), (5, 1), (5, 1))
TURN_OFF_DELAY_TICKS = 5

# Function tags
LOAD_TAG = "data/minecraft/tags/functions/load.json"
TICK_TAG = "data/minecraft/tags/functions/tick.json"

SURFACE_NAMES = ("paraboloid", "saddle", "sine", "ripple")
