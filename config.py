"""
EvoBrain Configuration
All tunable parameters for genome decoding, mutation and brain construction.
"""

import os

# ─── Genome ───────────────────────────────────────────────────────────────────
GENOME_SIZE        = 16     # genes in a freshly seeded genome
GENOME_DELIMITER   = " "    # separator used by the genome text encoding
MUTATION_FREQUENCY = 0.15   # chance of a structural edit, and point-mutation ratio

# ─── Gene bit layout ──────────────────────────────────────────────────────────
CONNECTION_BIT   = 7        # set → connection gene
INVERTED_BIT     = 6        # connection: inversion flag
INTERNAL_BIT     = 6        # set (and bit 7 clear) → internal node gene
ACTION_BIT       = 5        # set → action node, clear → sense node
INDEX_MASK       = 0x3F     # bits 0-5: connection index / internal bias
KIND_MASK        = 0x1F     # bits 0-4: sense / action kind index
BIAS_DIVISOR     = 32.0     # internal bias = (bits 0-5) / BIAS_DIVISOR

# ─── Sense / Action enumerations ──────────────────────────────────────────────
# Order is part of the genome format: a kind index decodes as
# raw_index % len(labels) against these tables. Never reorder.
SENSE_LABELS = {
    0: "Blocked",         # cell ahead is occupied
    1: "Agent",           # agent directly ahead
    2: "AgentDensity",    # nearby agent density
    3: "Food",            # food directly ahead
    4: "FoodDensity",     # nearby food density
    5: "Direction",       # current facing
}
NUM_SENSES = len(SENSE_LABELS)

ACTION_LABELS = {
    0: "Move",
    1: "TurnLeft",
    2: "TurnRight",
    3: "Kill",
    4: "ProduceFood",
}
NUM_ACTIONS = len(ACTION_LABELS)

# ─── Brain evaluation ─────────────────────────────────────────────────────────
ACTION_BIAS = 1.0           # multiplier applied to an action node's mean input

# ─── Population ───────────────────────────────────────────────────────────────
POPULATION             = 100    # agents created by seed_population by default
MAX_SEED_ATTEMPTS      = 1000   # non-viable genomes tolerated while seeding
MAX_OFFSPRING_ATTEMPTS = 10     # reproduce() retries before giving up on a child

# ─── Output / Logging ─────────────────────────────────────────────────────────
LOG_LEVEL  = os.environ.get("EVOBRAIN_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# ─── Server ───────────────────────────────────────────────────────────────────
SERVER_HOST = os.environ.get("EVOBRAIN_HOST", "0.0.0.0")
SERVER_PORT = int(os.environ.get("EVOBRAIN_PORT", "5000"))
MAX_API_GENES  = 4096       # largest genome the HTTP API will generate
MAX_API_AGENTS = 1000       # largest population the HTTP API will seed
MAX_API_BRAIN_GENES = 256   # largest genome the HTTP API will compile or evaluate
