import json
import traceback

class CandleViewError(Exception):
    """Base exception for candleview"""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

class ValidationError(CandleViewError):
    """Bad option, config value or parameter"""
    pass

class FetchError(CandleViewError):
    """Source resource could not be fetched (non-2xx, transport or file error)"""
    pass

class EmptySourceError(CandleViewError):
    """Source produced no usable price rows"""
    pass

class TimestampError(CandleViewError):
    """Malformed DD-MM-YYYY HH:MM timestamp"""
    pass

class LoadError(CandleViewError):
    """Series provider ended in the error state"""
    pass

def error_payload(e: Exception) -> dict:
    """Error envelope for JSON output; unknown exceptions carry their traceback."""
    if isinstance(e, CandleViewError):
        error = {
            "type": e.__class__.__name__,
            "message": e.message,
            "details": e.details,
        }
    else:
        error = {
            "type": "UnknownError",
            "message": str(e) or e.__class__.__name__,
            "details": {"traceback": traceback.format_exc().splitlines()},
        }
    return {"ok": False, "error": error, "meta": {"version": 1}}

def format_error(e: Exception) -> str:
    return json.dumps(error_payload(e), indent=2, default=str)
