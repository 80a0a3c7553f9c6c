from fitscore.analysis.factory import InferenceClientFactory
from fitscore.analysis.normalizer import Normalizer

__all__ = ["InferenceClientFactory", "Normalizer"]
