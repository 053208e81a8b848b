from .normalize import discrete_curve, normalize_xy

__all__ = ["discrete_curve", "normalize_xy"]
