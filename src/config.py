import os
import logging
from dotenv import load_dotenv

load_dotenv()

# Logging Configuration
# Read-only deployments cannot open the log file, so fall back to the stream handler only
handlers = []
try:
    handlers.append(logging.FileHandler('surebet.log'))
except (OSError, PermissionError):
    pass
handlers.append(logging.StreamHandler())

LOG_LEVEL = os.getenv("SUREBET_LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=handlers
)
logger = logging.getLogger('surebet')

# Database Configuration
DATABASE_PATH = os.getenv(
    "SUREBET_DATABASE_PATH",
    os.path.join(os.path.dirname(os.path.dirname(__file__)), "data", "surebet.db"),
)

# Surebet markets
SUPPORTED_OUTCOME_COUNTS = (2, 3, 4)
TOTAL_FIELD = "total"
STAKE_FIELD_PREFIX = "stake"

# Calculator
ERROR_MARKER = "Error"
OPERATORS = ("+", "-", "*", "/")
DIGIT_KEYS = tuple("0123456789") + (".",)

# Storage keys, one per calculator state field
CALCULATOR_INPUT_KEY = "calculatorInput"
CALCULATOR_HISTORY_KEY = "calculatorHistory"
CALCULATOR_PREVIOUS_VALUE_KEY = "calculatorPreviousValue"
CALCULATOR_OPERATOR_KEY = "calculatorOperator"
CALCULATOR_RESULT_FLAG_KEY = "isResultDisplayed"

CALCULATOR_KEYS = [
    CALCULATOR_INPUT_KEY,
    CALCULATOR_HISTORY_KEY,
    CALCULATOR_PREVIOUS_VALUE_KEY,
    CALCULATOR_OPERATOR_KEY,
    CALCULATOR_RESULT_FLAG_KEY,
]

# One saved-bet list per calculator
SAVED_BETS_KEYS = {count: f"savedBets{count}Way" for count in SUPPORTED_OUTCOME_COUNTS}
