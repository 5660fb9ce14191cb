"""
Quadmotion: locomotion state machine and leg kinematics for a
twelve-actuator quadruped.
"""

__version__ = '0.1.0'
