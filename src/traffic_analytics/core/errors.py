from ..utils.helpers import TrafficAnalyticsError


class AnalyticsError(TrafficAnalyticsError):
    """Raised when an analytic view cannot be computed"""

    pass


class DivisionByZeroError(AnalyticsError, ZeroDivisionError):
    """Raised when a statistic would divide by an empty record set or window"""

    pass


class WindowError(AnalyticsError):
    """Raised when a requested time window is incomplete or inverted"""

    pass
