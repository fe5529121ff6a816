import logging
import sys
from typing import Callable, List

from azure.core.exceptions import AzureError
from azure.mgmt.subscription import SubscriptionClient

from storage_audit.core.exceptions import SubscriptionSelectionError
from storage_audit.models.storage import Subscription

logger = logging.getLogger(__name__)

Selector = Callable[[List[Subscription]], Subscription]


def list_subscriptions(credential, subscription_client=None) -> List[Subscription]:
    """List all subscriptions visible to the credential, in service order"""
    client = subscription_client or SubscriptionClient(credential)
    try:
        subscriptions = []
        for subscription in client.subscriptions.list():
            state = subscription.state
            subscriptions.append(Subscription(
                subscription_id=subscription.subscription_id,
                display_name=subscription.display_name or subscription.subscription_id,
                state=state.value if hasattr(state, 'value') else str(state) if state else None
            ))
        return subscriptions
    except AzureError as e:
        logger.error(f"Failed to list subscriptions: {e}")
        raise SubscriptionSelectionError(f"Failed to list subscriptions: {e}") from e


def _pick(subscriptions: List[Subscription], choice: int) -> Subscription:
    if choice < 1 or choice > len(subscriptions):
        raise SubscriptionSelectionError(
            f"Invalid choice {choice}: expected a number between 1 and {len(subscriptions)}"
        )
    return subscriptions[choice - 1]


class IndexSelector:
    """Picks the subscription at a 1-based position"""

    def __init__(self, index: int):
        self.index = index

    def __call__(self, subscriptions: List[Subscription]) -> Subscription:
        return _pick(subscriptions, self.index)


class MatchSelector:
    """Picks the first subscription whose id or display name matches"""

    def __init__(self, value: str):
        self.value = value.strip().lower()

    def __call__(self, subscriptions: List[Subscription]) -> Subscription:
        for subscription in subscriptions:
            if self.value in (subscription.subscription_id.lower(), subscription.display_name.lower()):
                return subscription
        raise SubscriptionSelectionError(f"No subscription matches {self.value!r}")


class InteractiveSelector:
    """Prints a numbered list and reads the operator's choice"""

    prompt = "Enter the number of the subscription you want to use: "

    def __init__(self, input_func: Callable[[str], str] = input, output=None):
        self.input_func = input_func
        self.output = output

    def __call__(self, subscriptions: List[Subscription]) -> Subscription:
        output = self.output or sys.stdout
        print("Available subscriptions:", file=output)
        for i, subscription in enumerate(subscriptions, start=1):
            print(f"{i}. {subscription.display_name} ({subscription.subscription_id})", file=output)

        try:
            answer = self.input_func(self.prompt)
        except EOFError as e:
            raise SubscriptionSelectionError("invalid choice: no input") from e

        try:
            choice = int(answer.strip())
        except ValueError as e:
            raise SubscriptionSelectionError(f"invalid choice: {answer.strip()!r} is not a number") from e

        return _pick(subscriptions, choice)


def select_subscription(credential, selector: Selector, subscription_client=None) -> Subscription:
    """List subscriptions and let the selector choose one"""
    subscriptions = list_subscriptions(credential, subscription_client=subscription_client)
    if not subscriptions:
        raise SubscriptionSelectionError("No subscriptions are available for this credential")

    subscription = selector(subscriptions)
    logger.info(f"Selected subscription {subscription.display_name} ({subscription.subscription_id})")
    return subscription
