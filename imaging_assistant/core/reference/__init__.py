from .modalities import ImagingModality, IMAGING_MODALITIES, list_modalities

__all__ = ["ImagingModality", "IMAGING_MODALITIES", "list_modalities"]
