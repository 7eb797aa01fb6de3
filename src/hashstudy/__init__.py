"""Hash collision study core package."""

from . import analysis, contracts, core, experiments, workloads

__all__ = [
    "analysis",
    "contracts",
    "core",
    "experiments",
    "workloads",
]
