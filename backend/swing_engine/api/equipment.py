"""
API routes for the equipment profile table.
"""

from fastapi import APIRouter, HTTPException

from swing_engine.api.schemas import EquipmentResponse
from swing_engine.models.equipment import EquipmentProfile, get_equipment_table


router = APIRouter(prefix="/equipment", tags=["equipment"])


def _build_equipment_response(profile: EquipmentProfile) -> EquipmentResponse:
    return EquipmentResponse(
        id=profile.id,
        display_name=profile.display_name,
        loft_angle_deg=profile.loft_angle_deg,
        length_m=profile.length_m,
        weight_kg=profile.weight_kg,
        coefficient_of_restitution=profile.coefficient_of_restitution,
        average_distance_yd=profile.average_distance_yd,
        speed_calibration_factor=profile.speed_calibration_factor,
        optimal_smash_factor=profile.optimal_smash_factor,
        launch_angle_min_deg=profile.launch_angle_bounds_deg.min,
        launch_angle_max_deg=profile.launch_angle_bounds_deg.max,
        base_spin_rpm=profile.base_spin_rpm,
        club_head_speed_bounds_mph=profile.club_head_speed_bounds_mph,
    )


@router.get("", response_model=list[EquipmentResponse])
async def list_equipment():
    return [_build_equipment_response(p) for p in get_equipment_table()]


@router.get("/{equipment_id}", response_model=EquipmentResponse)
async def get_equipment(equipment_id: str):
    """
    Get one profile by id or display name (case-insensitive).
    """
    try:
        profile = get_equipment_table().get(equipment_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Equipment not found: {equipment_id}")
    return _build_equipment_response(profile)
