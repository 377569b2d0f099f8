"""Fixed tables for the penetration estimator."""
from __future__ import annotations

# Quality tier -> performance multiplier
QUALITY_ARMOR_MULTS = (1.0, 1.2, 1.4, 1.6, 1.8, 2.0, 3.0)
QUALITY_WEAPON_MULTS = (0.5, 0.6, 0.7, 0.8, 0.9, 1.0)

# (tier index, multiplicity); high tiers are rare
ARMOR_QUALITY_WEIGHTS = ((0, 4), (1, 4), (2, 3), (3, 2), (4, 2), (5, 2), (6, 1))
WEAPON_QUALITY_WEIGHTS = ((0, 3), (1, 2), (2, 2), (3, 2), (4, 2), (5, 1))

# Ordered thresholds for bucketed-uniform draws
BODY_SIZE_BUCKETS = (0.9, 0.95, 0.98, 1.0, 1.02, 1.05, 1.10)
STRENGTH_BUCKETS = (450, 950, 1150, 1250, 1350, 1550, 2250)
BODY_SIZE_DIMENSIONS = 3

BASE_BODY_SIZE = 60000.0

# greaves, breastplate, helmet
CONTACT_AREA_FRACTIONS = (0.048, 0.036, 0.0162)

MOMENTUM_SCALE = 1_000_000.0
SHARPNESS_SCALE = 10000.0
IMPACT_SCALE = 1_000_000.0
DENT_SCALE = 1000.0
PARTIAL_CREDIT_SCALE = 50_000.0
BLUNTED_FRACTURE_SCORE = 0.95
