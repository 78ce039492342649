# Domain errors raised by services and translated to HTTP errors by routers


class PingPanelError(Exception):
    """Base class for service-layer errors"""


class CategoryNotFound(PingPanelError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Category "{name}" not found')


class CategoryAlreadyExists(PingPanelError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Category "{name}" already exists')


class CategoryLimitReached(PingPanelError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Category limit of {limit} reached. Upgrade your plan for more categories")


class QuotaExceeded(PingPanelError):
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__("Monthly quota reached. Please upgrade your plan for more events")


class DeliveryFailed(PingPanelError):
    def __init__(self, event_id, reason: str):
        self.event_id = event_id
        self.reason = reason
        super().__init__(f"Error processing event: {reason}")
