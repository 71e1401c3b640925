"""
LiveCounter Errors

Exception hierarchy shared by the persistence, session and web layers.
"""


class LiveCounterError(Exception):
    """Base exception for LiveCounter errors"""
    pass


class PersistenceError(LiveCounterError):
    """Raised when the durable store fails to read or write a value"""
    pass


class DeliveryError(LiveCounterError):
    """Raised when a subscriber channel rejects an update"""
    pass


__all__ = ["LiveCounterError", "PersistenceError", "DeliveryError"]
