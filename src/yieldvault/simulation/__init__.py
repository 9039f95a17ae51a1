"""Randomized vault simulation."""

from .runner import Rejection, SimulationResult, VaultSimulationRunner

__all__ = ["Rejection", "SimulationResult", "VaultSimulationRunner"]
