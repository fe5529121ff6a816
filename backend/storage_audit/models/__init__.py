from .storage import ContainerSize, ContainerResult, AccountReport, Subscription

__all__ = [
    "ContainerSize",
    "ContainerResult",
    "AccountReport",
    "Subscription"
]
