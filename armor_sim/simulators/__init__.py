"""Randomized estimators and grid stencils."""
