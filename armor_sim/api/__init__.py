"""HTTP front end for the armor penetration estimator.

Usage:
    python -m armor_sim.api.run

Then POST records to http://localhost:8000/api/attack-score.
"""
