"""
Unit conversion helpers for the trajectory model.
"""

import math


MPH_TO_MS = 0.44704
METERS_TO_YARDS = 1.09361
GRAVITY_MS2 = 9.81


def mph_to_ms(mph: float) -> float:
    return mph * MPH_TO_MS


def meters_to_yards(meters: float) -> float:
    return meters * METERS_TO_YARDS


def deg_to_rad(deg: float) -> float:
    return deg * math.pi / 180.0


def rad_to_deg(rad: float) -> float:
    return rad * 180.0 / math.pi
