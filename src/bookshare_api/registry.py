"""Registry of every API method, built from the endpoint tables of each topic."""

from types import MappingProxyType

from . import account, agreement, organization, periodical, proof_of_disability, reading_list, subscription, title
from .parameters import EndpointRegistry

TOPICS = {
    "account": account.AccountEndpoints,
    "title": title.TitleEndpoints,
    "periodical": periodical.PeriodicalEndpoints,
    "reading_list": reading_list.ReadingListEndpoints,
    "subscription": subscription.SubscriptionEndpoints,
    "organization": organization.OrganizationEndpoints,
    "agreement": agreement.AgreementEndpoints,
    "proof_of_disability": proof_of_disability.ProofOfDisabilityEndpoints,
}

REGISTRY = EndpointRegistry(
    spec.model_copy(update={"topic": topic})
    for topic, group in TOPICS.items()
    for spec in group.endpoints
)

# Required parameters by method name
REQUIRED_PARAMETERS = REGISTRY.required_table()

# Topic of each method
METHOD_TOPICS = MappingProxyType({spec.name: spec.topic for spec in REGISTRY})
