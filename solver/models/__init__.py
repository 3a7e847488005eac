"""Solver models: structured model outputs and client session state."""
from .llm_outputs import (
    ExtractionResult,
    SolveResult,
    DecomposeResult,
    CheckThinkingResult,
    VerifyResult,
    GatewayResult,
)
from .problem_stack import ProblemStack, StackEntry, ChatLog, ChatMessage
