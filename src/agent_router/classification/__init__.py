"""Classification strategy and routing-instruction building."""

from agent_router.classification.instructions import InstructionBuilder, confidence_for
from agent_router.classification.strategy import Classifier, is_high_confidence

__all__ = [
    "Classifier",
    "InstructionBuilder",
    "confidence_for",
    "is_high_confidence",
]
