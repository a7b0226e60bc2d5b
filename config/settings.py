#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
TurretCAM settings
Turret-punch CAM: nesting, path optimization and program output

Values come from the environment (or a .env file) with defaults below.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env
load_dotenv()

# ============================================================
# PATHS
# ============================================================

# JSON configuration (machine, optimizer, nesting defaults)
CONFIG_PATH = os.getenv(
    "TURRETCAM_CONFIG_PATH",
    str(Path(__file__).resolve().parent / "default_config.json")
)

# ============================================================
# LOGGING
# ============================================================

LOG_LEVEL = os.getenv("TURRETCAM_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

# ============================================================
# NESTING
# ============================================================

# Candidate position step of the irregular packer (mm)
NESTING_GRID_STEP = float(os.getenv("TURRETCAM_NESTING_GRID_STEP", "5.0"))

# X distance scanned between progress heartbeats (mm)
NESTING_YIELD_EVERY = float(os.getenv("TURRETCAM_NESTING_YIELD_EVERY", "50.0"))

# ============================================================
# PATH OPTIMIZER
# ============================================================

# Band width of the x-axis / y-axis scan (mm)
BAND_TOLERANCE = float(os.getenv("TURRETCAM_BAND_TOLERANCE", "50.0"))

# Singleton strikes closer than this are chained into one cluster (mm)
CLUSTER_DISTANCE = float(os.getenv("TURRETCAM_CLUSTER_DISTANCE", "30.0"))

# Band width of the contour snake; keep it tight (mm)
CONTOUR_BAND_TOLERANCE = float(os.getenv("TURRETCAM_CONTOUR_BAND_TOLERANCE", "1.0"))

# ============================================================
# PROGRAM OUTPUT
# ============================================================

PROGRAM_DECIMALS = int(os.getenv("TURRETCAM_PROGRAM_DECIMALS", "3"))
PROGRAM_EXTENSION = os.getenv("TURRETCAM_PROGRAM_EXTENSION", ".nc")
