"""Application constants - all magic numbers centralized."""

# Recent problems listing
DEFAULT_RECENT_PROBLEMS = 5
MAX_RECENT_PROBLEMS = 10  # Hard cap regardless of the requested limit

# Public projection defaults
DEFAULT_CATEGORY = "General"
DEFAULT_PROBLEM_TITLE = "Problem"
DEFAULT_RECENT_TITLE = "Untitled Problem"

# Subproblems are insight checks, not answer checks
SUBPROBLEM_HIDDEN_ANSWER = ""

# LLM token budgets per operation
EXTRACT_MAX_TOKENS = 2048
SOLVE_MAX_TOKENS = 4096
DECOMPOSE_MAX_TOKENS = 2048
CHECK_MAX_TOKENS = 1024
VERIFY_MAX_TOKENS = 1024
