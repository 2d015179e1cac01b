# engine_py/src/landlord_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

# Reported to the acting connection only
INVALID_COMBINATION = "INVALID_COMBINATION"
CANNOT_BEAT = "CANNOT_BEAT"
NOT_OWNED = "NOT_OWNED"
MUST_LEAD = "MUST_LEAD"
ROOM_FULL = "ROOM_FULL"
NAME_TAKEN = "NAME_TAKEN"
ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
INVALID_EVENT = "INVALID_EVENT"
INTERNAL_ERROR = "INTERNAL_ERROR"

# Dropped without telling the sender
OUT_OF_TURN = "OUT_OF_TURN"
WRONG_PHASE = "WRONG_PHASE"

SILENT_CODES = {OUT_OF_TURN, WRONG_PHASE}

# Helper function to raise common errors
def raise_error(code: str, message: str):
    raise GameError(code, message)
