"""
FAIR CASINO — Engine Configuration

Environment-driven constants for the provably fair engine.
Every value can be overridden from the process environment or a `.env` file:

    FAIR_HOUSE_EDGE_FACTOR=0.95      # flat edge factor (Dice, Mines, HiLo)
    FAIR_PLACEMENT_STRIDE=1000       # cursor block per placement lane
    FAIR_NONCE_RANGE=1000000         # nonce drawn from [0, range)
    FAIR_CLIENT_SEED_LENGTH=13       # auto-generated client seed length
    FAIR_SIM_ROUNDS=20000            # default Monte Carlo rounds
    FAIR_SIM_SEED=42                 # default Monte Carlo RNG seed
    FAIR_LOG_LEVEL=INFO
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).parent.parent


class EngineConfig:

    # --- House edge ---
    HOUSE_EDGE_FACTOR = float(os.getenv("FAIR_HOUSE_EDGE_FACTOR", "0.95"))

    # --- Randomness ---
    PLACEMENT_STRIDE = int(os.getenv("FAIR_PLACEMENT_STRIDE", "1000"))
    NONCE_RANGE      = int(os.getenv("FAIR_NONCE_RANGE", "1000000"))
    CLIENT_SEED_LENGTH = int(os.getenv("FAIR_CLIENT_SEED_LENGTH", "13"))

    # --- Simulation ---
    SIM_ROUNDS = int(os.getenv("FAIR_SIM_ROUNDS", "20000"))
    SIM_SEED   = int(os.getenv("FAIR_SIM_SEED", "42"))

    # --- Logging ---
    LOG_LEVEL  = os.getenv("FAIR_LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = "[%(asctime)s] %(levelname)s %(message)s"
    LOG_DATEFMT = "%H:%M:%S"

    @classmethod
    def configure_logging(cls, level: str = None) -> logging.Logger:
        """Attach a stream handler to the `fair_casino` logger tree once."""
        logger = logging.getLogger("fair_casino")
        if not logger.handlers:
            _h = logging.StreamHandler()
            _h.setFormatter(logging.Formatter(cls.LOG_FORMAT, datefmt=cls.LOG_DATEFMT))
            logger.addHandler(_h)
        logger.setLevel(getattr(logging, (level or cls.LOG_LEVEL).upper(), logging.INFO))
        return logger

    @classmethod
    def summary(cls) -> dict:
        return {
            "house_edge_factor": cls.HOUSE_EDGE_FACTOR,
            "placement_stride": cls.PLACEMENT_STRIDE,
            "nonce_range": cls.NONCE_RANGE,
            "client_seed_length": cls.CLIENT_SEED_LENGTH,
            "sim_rounds": cls.SIM_ROUNDS,
            "sim_seed": cls.SIM_SEED,
            "log_level": cls.LOG_LEVEL,
        }
