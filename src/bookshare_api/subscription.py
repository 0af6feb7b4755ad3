"""User subscription endpoints (membership assistants)."""

from typing import Any, Optional

from .endpoints import USER_ALIAS, EndpointGroup
from .errors import ErrorKind, domain_table
from .models import UserSubscription, UserSubscriptionList, UserSubscriptionTypeList
from .parameters import EndpointRegistry, endpoint

SUBSCRIPTION_TABLE = domain_table()

SUBSCRIPTION_FIELDS = ("startDate", "endDate", "userSubscriptionType", "numBooksAllowed", "notes")

ENDPOINTS = (
    endpoint(
        "get_subscriptions", "get", "accounts/{userIdentifier}/subscriptions",
        required="userIdentifier", alias=USER_ALIAS,
        record=UserSubscriptionList, reference_id="_get-subscriptions", role="membership",
    ),
    endpoint(
        "create_subscription", "post", "accounts/{userIdentifier}/subscriptions",
        required="userIdentifier startDate userSubscriptionType",
        optional="endDate numBooksAllowed notes", alias=USER_ALIAS,
        record=UserSubscription, reference_id="_create-subscription", role="membership",
    ),
    endpoint(
        "get_subscription", "get", "accounts/{userIdentifier}/subscriptions/{subscriptionId}",
        required="userIdentifier subscriptionId", alias=USER_ALIAS,
        record=UserSubscription, reference_id="_get-single-subscription", role="membership",
    ),
    endpoint(
        "update_subscription", "put", "accounts/{userIdentifier}/subscriptions/{subscriptionId}",
        required="userIdentifier subscriptionId", optional=SUBSCRIPTION_FIELDS, alias=USER_ALIAS,
        record=UserSubscription, reference_id="_update-subscription", role="membership",
    ),
    endpoint(
        "get_subscription_types", "get", "subscriptiontypes",
        record=UserSubscriptionTypeList, reference_id="_get-subscription-types", role="membership",
    ),
)


class SubscriptionEndpoints(EndpointGroup):
    endpoints = EndpointRegistry(ENDPOINTS)
    error_kind = ErrorKind.SUBSCRIPTION
    message_table = SUBSCRIPTION_TABLE

    def get_subscriptions(self, user: Any = None) -> UserSubscriptionList:
        """GET /v2/accounts/{userIdentifier}/subscriptions"""
        return self.call("get_subscriptions", userIdentifier=self.user_id(user))

    def create_subscription(
        self,
        user: Any = None,
        startDate: Optional[str] = None,
        userSubscriptionType: Optional[str] = None,
        **opt,
    ) -> UserSubscription:
        """POST /v2/accounts/{userIdentifier}/subscriptions"""
        return self.call(
            "create_subscription",
            userIdentifier=self.user_id(user),
            startDate=startDate,
            userSubscriptionType=userSubscriptionType,
            **opt,
        )

    def get_subscription(self, user: Any = None, subscriptionId: Optional[str] = None) -> UserSubscription:
        """GET /v2/accounts/{userIdentifier}/subscriptions/{subscriptionId}"""
        return self.call("get_subscription", userIdentifier=self.user_id(user), subscriptionId=subscriptionId)

    def update_subscription(self, user: Any = None, subscriptionId: Optional[str] = None, **opt) -> UserSubscription:
        """PUT /v2/accounts/{userIdentifier}/subscriptions/{subscriptionId}"""
        return self.call(
            "update_subscription", userIdentifier=self.user_id(user), subscriptionId=subscriptionId, **opt
        )

    def get_subscription_types(self) -> UserSubscriptionTypeList:
        """GET /v2/subscriptiontypes"""
        return self.call("get_subscription_types")
