"""Proof of disability endpoints (membership assistants)."""

from typing import Any, Optional

from .endpoints import USER_ALIAS, EndpointGroup
from .errors import ErrorKind, domain_table
from .models import StatusModel, UserPodList
from .parameters import EndpointRegistry, endpoint

POD_TABLE = domain_table()

ENDPOINTS = (
    endpoint(
        "get_user_pod", "get", "accounts/{userIdentifier}/pod",
        required="userIdentifier", alias=USER_ALIAS,
        record=UserPodList, reference_id="_get-user-pod", role="membership",
    ),
    endpoint(
        "create_user_pod", "post", "accounts/{userIdentifier}/pod",
        required="userIdentifier disabilityType proofSource", alias=USER_ALIAS,
        record=StatusModel, reference_id="_create-user-pod", role="membership",
    ),
    endpoint(
        "update_user_pod", "put", "accounts/{userIdentifier}/pod/{disabilityType}",
        required="userIdentifier disabilityType proofSource", alias=USER_ALIAS,
        record=StatusModel, reference_id="_update-user-pod", role="membership",
    ),
    endpoint(
        "remove_user_pod", "delete", "accounts/{userIdentifier}/pod/{disabilityType}",
        required="userIdentifier disabilityType", alias=USER_ALIAS,
        record=StatusModel, reference_id="_remove-user-pod", role="membership",
    ),
)


class ProofOfDisabilityEndpoints(EndpointGroup):
    endpoints = EndpointRegistry(ENDPOINTS)
    error_kind = ErrorKind.PROOF_OF_DISABILITY
    message_table = POD_TABLE

    def get_user_pod(self, user: Any = None) -> UserPodList:
        """GET /v2/accounts/{userIdentifier}/pod"""
        return self.call("get_user_pod", userIdentifier=self.user_id(user))

    def create_user_pod(
        self, user: Any = None, disabilityType: Optional[str] = None, proofSource: Optional[str] = None
    ) -> StatusModel:
        """POST /v2/accounts/{userIdentifier}/pod"""
        return self.call(
            "create_user_pod",
            userIdentifier=self.user_id(user),
            disabilityType=disabilityType,
            proofSource=proofSource,
        )

    def update_user_pod(
        self, user: Any = None, disabilityType: Optional[str] = None, proofSource: Optional[str] = None
    ) -> StatusModel:
        """PUT /v2/accounts/{userIdentifier}/pod/{disabilityType}"""
        return self.call(
            "update_user_pod",
            userIdentifier=self.user_id(user),
            disabilityType=disabilityType,
            proofSource=proofSource,
        )

    def remove_user_pod(self, user: Any = None, disabilityType: Optional[str] = None) -> StatusModel:
        """DELETE /v2/accounts/{userIdentifier}/pod/{disabilityType}"""
        return self.call("remove_user_pod", userIdentifier=self.user_id(user), disabilityType=disabilityType)
