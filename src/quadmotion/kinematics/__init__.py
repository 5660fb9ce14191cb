from .leg_kinematics import LegKinematics
from .leg_model import LegGeometry, LegModel, LegState

__all__ = ["LegGeometry", "LegKinematics", "LegModel", "LegState"]
