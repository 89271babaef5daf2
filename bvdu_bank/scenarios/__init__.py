"""Scenarios that drive the engine through its public operations."""

from bvdu_bank.scenarios.demo import DemoPopulationScenario

__all__ = [
    "DemoPopulationScenario",
]
