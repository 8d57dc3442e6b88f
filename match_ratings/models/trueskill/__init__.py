"""TrueSkill rating model."""

from .trueskill import TrueSkill, TrueSkillConfig

__all__ = ["TrueSkill", "TrueSkillConfig"]
