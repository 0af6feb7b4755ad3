"""Organization endpoints (membership assistants)."""

from typing import Optional

from .endpoints import LIST_OPTIONS, EndpointGroup
from .errors import ErrorKind, domain_table
from .models import Organization, OrganizationTypeList, UserAccount, UserAccountList
from .parameters import EndpointRegistry, endpoint

ORGANIZATION_TABLE = domain_table()

ORGANIZATION_ALIAS = {"organization": "organizationId"}

ADDRESS_FIELDS = ("address1", "address2", "city", "state", "country", "postalCode")

ENDPOINTS = (
    endpoint(
        "get_organization", "get", "organizations/{organizationId}",
        required="organizationId", alias=ORGANIZATION_ALIAS,
        record=Organization, reference_id="_get-organization", role="membership",
    ),
    endpoint(
        "create_organization", "post", "organizations",
        required="organizationName organizationType address1 city country postalCode",
        optional="address2 state phoneNumber website",
        record=Organization, reference_id="_create-organization", role="membership",
    ),
    endpoint(
        "get_organization_members", "get", "organizations/{organizationId}/members",
        required="organizationId", optional=LIST_OPTIONS, alias=ORGANIZATION_ALIAS,
        record=UserAccountList, reference_id="_get-organization-members", role="membership",
    ),
    endpoint(
        "add_organization_member", "post", "organizations/{organizationId}/members",
        required="organizationId firstName lastName emailAddress",
        optional=("phoneNumber", *ADDRESS_FIELDS, "dateOfBirth", "language", "role", "password"),
        alias=ORGANIZATION_ALIAS,
        record=UserAccount, reference_id="_add-organization-member", role="membership",
    ),
    endpoint(
        "get_organization_types", "get", "organizationTypes",
        record=OrganizationTypeList, reference_id="_get-organization-types", role="membership",
    ),
)


class OrganizationEndpoints(EndpointGroup):
    endpoints = EndpointRegistry(ENDPOINTS)
    error_kind = ErrorKind.ORGANIZATION
    message_table = ORGANIZATION_TABLE

    def get_organization(self, organization: Optional[str] = None) -> Organization:
        """GET /v2/organizations/{organizationId}"""
        return self.call("get_organization", organizationId=organization)

    def create_organization(
        self,
        organizationName: Optional[str] = None,
        organizationType: Optional[str] = None,
        address1: Optional[str] = None,
        city: Optional[str] = None,
        country: Optional[str] = None,
        postalCode: Optional[str] = None,
        **opt,
    ) -> Organization:
        """POST /v2/organizations"""
        return self.call(
            "create_organization",
            organizationName=organizationName,
            organizationType=organizationType,
            address1=address1,
            city=city,
            country=country,
            postalCode=postalCode,
            **opt,
        )

    def get_organization_members(self, organization: Optional[str] = None, **opt) -> UserAccountList:
        """GET /v2/organizations/{organizationId}/members"""
        return self.call("get_organization_members", organizationId=organization, **opt)

    def add_organization_member(
        self,
        organization: Optional[str] = None,
        firstName: Optional[str] = None,
        lastName: Optional[str] = None,
        emailAddress: Optional[str] = None,
        **opt,
    ) -> UserAccount:
        """POST /v2/organizations/{organizationId}/members"""
        return self.call(
            "add_organization_member",
            organizationId=organization,
            firstName=firstName,
            lastName=lastName,
            emailAddress=emailAddress,
            **opt,
        )

    def get_organization_types(self) -> OrganizationTypeList:
        """GET /v2/organizationTypes"""
        return self.call("get_organization_types")
