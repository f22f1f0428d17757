"""
Spoken-math normalization pipeline steps.

Each step is a :class:`RewriteStage`; :func:`build_stages` returns them in the
order the pipeline must run them. The order is load-bearing: compound
numbers before fractions before decimals before percentages before operator
words before cleanup.
"""

from typing import List

from ..pattern_cache import CompiledLanguageRegex
from .base import RewriteStage
from .step0_prepare import PrepareStage, prepare_transcript
from .step1_compound import CompoundNumberStage, convert_compound_numbers
from .step2_number_words import NumberWordStage, compose_cardinals
from .step3_fractions import FractionStage, convert_fractions
from .step4_decimals import DecimalStage
from .step5_percentages import PercentageStage, apply_percentage_operations, clean_number_string
from .step6_operators import OperatorStage
from .step7_cleanup import CleanupStage, clean_expression

STAGE_CLASSES = (
    PrepareStage,
    CompoundNumberStage,
    NumberWordStage,
    FractionStage,
    DecimalStage,
    PercentageStage,
    OperatorStage,
    CleanupStage,
)


def build_stages(compiled: CompiledLanguageRegex) -> List[RewriteStage]:
    """Instantiate every step for one language, in pipeline order."""
    return [stage_class(compiled) for stage_class in STAGE_CLASSES]


__all__ = [
    "STAGE_CLASSES",
    "CleanupStage",
    "CompoundNumberStage",
    "DecimalStage",
    "FractionStage",
    "NumberWordStage",
    "OperatorStage",
    "PercentageStage",
    "PrepareStage",
    "RewriteStage",
    "apply_percentage_operations",
    "build_stages",
    "clean_expression",
    "clean_number_string",
    "compose_cardinals",
    "convert_compound_numbers",
    "convert_fractions",
    "prepare_transcript",
]
