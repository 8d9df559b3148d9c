class VarlinkError(Exception):
    """Base exception for all varlink related errors."""
    pass

class ValidationError(VarlinkError):
    """Raised when a model is built from invalid data."""
    pass

class FeatureExprError(VarlinkError):
    """Raised when a presence condition cannot be parsed or built."""
    pass

class OracleError(VarlinkError):
    """Raised when the SAT backend fails to decide a query."""
    pass
