"""
navhydro Physical Constants and Engine Defaults

Constants shared by the integration, hydrostatics and stability layers.
All lengths are in the geometry's linear unit (meters in practice) and all
densities in the loadcase's density unit (kg/m³ in practice).
"""

import math

# ==================== Physical Constants ====================

# Water properties
SEAWATER_DENSITY_KG_M3 = 1025.0  # kg/m³ at 15°C, 35 ppt salinity
FRESHWATER_DENSITY_KG_M3 = 1000.0  # kg/m³ at 15°C

# Angle conversion
DEG_TO_RAD = math.pi / 180.0
RAD_TO_DEG = 180.0 / math.pi

# ==================== Numerical Tolerances ====================

# Two abscissae spacings closer than this are treated as equal (1 mm)
SPACING_TOLERANCE_M = 0.001

# A draft within this distance of a tabulated waterline snaps onto it
DRAFT_SNAP_TOLERANCE_M = 1e-4

# Volumes below this are treated as "no immersed hull"
VOLUME_EPSILON_M3 = 1e-9

# Root-finding tolerance for the heeled waterline (m)
HEELED_WATERLINE_XTOL_M = 1e-9

# ==================== Engine Defaults ====================

DEFAULT_CURVE_POINTS = 50
DEFAULT_MIN_HEEL_DEG = 0.0
# Wall-sided sweeps stop short of 90°
DEFAULT_MAX_HEEL_DEG = 80.0
DEFAULT_HEEL_STEP_DEG = 5.0

# Wall-sided formula is undefined at 90° (tan φ diverges)
WALL_SIDED_MAX_HEEL_DEG = 90.0

# Angle where the wall-sided approximation usually stops being trustworthy
WALL_SIDED_ACCURACY_LIMIT_DEG = 40.0

# Centimetres per metre, used by TPC/MCT
CM_PER_M = 100.0
