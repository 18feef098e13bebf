from .base import TextLayerEngine
from .pypdfium2_engine import Pypdfium2TextEngine

__all__ = ["TextLayerEngine", "Pypdfium2TextEngine"]
