"""Reporting views over rating runs."""

from .run_report import PlayerSelector, RunReport, TrajectoryPoint, conservative_skill

__all__ = ["PlayerSelector", "RunReport", "TrajectoryPoint", "conservative_skill"]
