"""Rating model implementations."""

from .random_model import RandomModel, RandomModelConfig
from .trueskill import TrueSkill, TrueSkillConfig

__all__ = [
    "RandomModel",
    "RandomModelConfig",
    "TrueSkill",
    "TrueSkillConfig",
]
