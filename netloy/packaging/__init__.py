"""Build orchestration: context, capability matrix, phase pipeline and builders.

Import ``netloy.packaging.factory`` to obtain a builder.
"""

from .capabilities import CAPABILITY_RULES, CapabilityRule, can_build, resolve_runtime
from .pipeline import Builder, BuildServices, Phase, PhaseRunner, run_pipeline

__all__ = [
    "CAPABILITY_RULES",
    "Builder",
    "BuildServices",
    "CapabilityRule",
    "Phase",
    "PhaseRunner",
    "can_build",
    "resolve_runtime",
    "run_pipeline",
]
