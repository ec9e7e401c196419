"""Personalized pharmacokinetic / pharmacodynamic simulation engine."""

__version__ = "0.1.0"
