"""Response normalization for model output."""

from .normalizer import ResultNormalizer

__all__ = ["ResultNormalizer"]
