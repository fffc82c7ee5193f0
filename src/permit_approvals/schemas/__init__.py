from .bases import CanonicalModel, BaseSignature, BasePermitParams

__all__ = [
    "CanonicalModel",
    "BaseSignature",
    "BasePermitParams",
]
