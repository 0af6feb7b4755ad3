"""Signed user agreement endpoints (membership assistants)."""

from typing import Any, Optional

from .endpoints import USER_ALIAS, EndpointGroup
from .errors import ErrorKind, domain_table
from .models import UserSignedAgreement, UserSignedAgreementList
from .parameters import EndpointRegistry, endpoint

AGREEMENT_TABLE = domain_table()

ENDPOINTS = (
    endpoint(
        "get_user_agreements", "get", "accounts/{userIdentifier}/agreements",
        required="userIdentifier", alias=USER_ALIAS,
        record=UserSignedAgreementList, reference_id="_get-user-agreements", role="membership",
    ),
    endpoint(
        "create_user_agreement", "post", "accounts/{userIdentifier}/agreements",
        required="userIdentifier agreementType dateSigned printName",
        optional="signedByLegalGuardian", alias=USER_ALIAS,
        record=UserSignedAgreement, reference_id="_record-user-agreement", role="membership",
    ),
    endpoint(
        "remove_user_agreement", "post", "accounts/{userIdentifier}/agreements/{agreementId}/expired",
        required="userIdentifier agreementId", alias={**USER_ALIAS, "id": "agreementId"},
        record=UserSignedAgreement, reference_id="_expire-user-agreement", role="membership",
    ),
)


class AgreementEndpoints(EndpointGroup):
    endpoints = EndpointRegistry(ENDPOINTS)
    error_kind = ErrorKind.AGREEMENT
    message_table = AGREEMENT_TABLE

    def get_user_agreements(self, user: Any = None) -> UserSignedAgreementList:
        """GET /v2/accounts/{userIdentifier}/agreements"""
        return self.call("get_user_agreements", userIdentifier=self.user_id(user))

    def create_user_agreement(
        self,
        user: Any = None,
        agreementType: Optional[str] = None,
        dateSigned: Optional[str] = None,
        printName: Optional[str] = None,
        **opt,
    ) -> UserSignedAgreement:
        """POST /v2/accounts/{userIdentifier}/agreements"""
        return self.call(
            "create_user_agreement",
            userIdentifier=self.user_id(user),
            agreementType=agreementType,
            dateSigned=dateSigned,
            printName=printName,
            **opt,
        )

    def remove_user_agreement(self, user: Any = None, id: Optional[str] = None) -> UserSignedAgreement:
        """
        POST /v2/accounts/{userIdentifier}/agreements/{agreementId}/expired

        Agreements are not deleted; they are marked as expired.
        """
        return self.call("remove_user_agreement", userIdentifier=self.user_id(user), agreementId=id)
