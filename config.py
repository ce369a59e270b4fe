"""
EvoForage Configuration
All tunable parameters for the foraging simulation.
"""

import math

# ─── World ────────────────────────────────────────────────────────────────────
# The arena is the unit square [0, 1) x [0, 1), wrapped on both axes.
NUM_ANIMALS = 40     # animals per generation
NUM_FOODS   = 60     # food items on the map at any time

# ─── Generations ──────────────────────────────────────────────────────────────
GENERATION_LENGTH = 2500   # simulator steps each generation lives
MAX_GENERATIONS   = 100    # default for the CLI

# ─── Movement ─────────────────────────────────────────────────────────────────
SPEED_MIN      = 0.001          # slowest an animal may move per step
SPEED_MAX      = 0.005          # fastest an animal may move per step
SPEED_ACCEL    = 0.2            # max speed change the brain may request
ROTATION_ACCEL = math.pi / 2    # max heading change the brain may request

FOOD_PICKUP_RADIUS = 0.01       # animal eats food within this distance

# ─── Eye ──────────────────────────────────────────────────────────────────────
FOV_RANGE = 0.25                        # how far an animal sees
FOV_ANGLE = math.pi + math.pi / 4       # total width of the vision cone
EYE_CELLS = 9                           # photoreceptors across the cone

# ─── Genetic Algorithm ────────────────────────────────────────────────────────
MUTATION_CHANCE      = 0.01   # probability a single gene is perturbed
MUTATION_COEFFICIENT = 0.3    # max magnitude of one perturbation

# ─── Output / Logging ─────────────────────────────────────────────────────────
SAVE_DIR          = "output"   # directory for saved images and charts
SNAPSHOT_INTERVAL = 10         # save a world snapshot every N generations
LOG_CSV           = True       # write per-generation CSV log
LOG_FORMAT        = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
