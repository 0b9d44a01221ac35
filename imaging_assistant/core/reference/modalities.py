"""
Imaging Modality Reference Data

Static catalogue served by the imaging-modalities endpoint.
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class ImagingModality:
    id: str
    name: str
    description: str
    uses: Tuple[str, ...]
    limitations: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["uses"] = list(self.uses)
        data["limitations"] = list(self.limitations)
        return data


IMAGING_MODALITIES: Tuple[ImagingModality, ...] = (
    ImagingModality(
        id="xray",
        name="X-Ray",
        description="Radiographic imaging using electromagnetic radiation",
        uses=("Bone fractures", "Chest conditions", "Dental imaging"),
        limitations=("Limited soft tissue detail", "Radiation exposure"),
    ),
    ImagingModality(
        id="ct",
        name="CT Scan",
        description="Computed Tomography - cross-sectional imaging using X-rays",
        uses=("Trauma", "Cancer detection", "Internal bleeding"),
        limitations=("Higher radiation", "Cost"),
    ),
    ImagingModality(
        id="mri",
        name="MRI",
        description="Magnetic Resonance Imaging using magnetic fields",
        uses=("Brain disorders", "Joint injuries", "Soft tissue tumors"),
        limitations=("Metallic implants", "Claustrophobia", "Cost and time"),
    ),
    ImagingModality(
        id="ultrasound",
        name="Ultrasound",
        description="Sonography using high-frequency sound waves",
        uses=("Pregnancy", "Abdominal organs", "Blood flow"),
        limitations=("Operator dependent", "Limited bone penetration"),
    ),
)


def list_modalities() -> List[Dict[str, Any]]:
    return [modality.to_dict() for modality in IMAGING_MODALITIES]
