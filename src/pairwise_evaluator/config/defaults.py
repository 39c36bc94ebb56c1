"""Default configuration values for pairwise-evaluator.

This module centralizes the hard-coded default values used throughout
the package, making them easy to discover and modify.
"""

# Comparative evaluation
DEFAULT_MAX_CONCURRENCY = 5
MAX_CONCURRENCY_MIN = 1
MAX_CONCURRENCY_MAX = 256
DEFAULT_RANDOMIZE_ORDER = False
DEFAULT_LOAD_NESTED = False

# Payload processing
DEFAULT_ANONYMIZER_MAX_DEPTH = 10
ANONYMIZER_MAX_DEPTH_MIN = 1
ANONYMIZER_MAX_DEPTH_MAX = 100

# Judge
DEFAULT_JUDGE_MODEL = "claude-haiku-4-5@20251001"
DEFAULT_JUDGE_TEMPERATURE = 0.1
DEFAULT_JUDGE_MAX_TURNS = 1
DEFAULT_JUDGE_MAX_RETRIES = 3

# Aggregation
DEFAULT_CONFIDENCE_LEVEL = 0.95
DEFAULT_BOOTSTRAP_SAMPLES = 1000
POSITION_BIAS_UPPER = 0.6
POSITION_BIAS_LOWER = 0.4

# Output
DEFAULT_FEEDBACK_FILENAME = "feedback.jsonl"
DEFAULT_COMPARATIVE_DIRNAME = "comparative"
