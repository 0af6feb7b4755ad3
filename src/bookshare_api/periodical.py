"""Periodical endpoints: series, editions and periodical subscriptions."""

from typing import Any, Optional

from .endpoints import LIST_OPTIONS, USER_ALIAS, EndpointGroup
from .errors import ErrorKind, domain_table
from .models import (
    PeriodicalEdition,
    PeriodicalEditionList,
    PeriodicalSeriesMetadataSummary,
    PeriodicalSeriesMetadataSummaryList,
    StatusModel,
)
from .parameters import EndpointRegistry, endpoint

PERIODICAL_TABLE = domain_table()

ENDPOINTS = (
    endpoint(
        "get_periodicals", "get", "periodicals",
        optional=("title", "issn", *LIST_OPTIONS),
        record=PeriodicalSeriesMetadataSummaryList, reference_id="_periodical-search",
    ),
    endpoint(
        "get_periodical", "get", "periodicals/{seriesId}",
        required="seriesId",
        record=PeriodicalSeriesMetadataSummary, reference_id="_periodical-metadata",
    ),
    endpoint(
        "update_periodical", "put", "periodicals/{seriesId}",
        required="seriesId", optional="title issn description publisher",
        record=PeriodicalSeriesMetadataSummary, reference_id="_periodical-edit-metadata",
        role="catalogAdmin",
    ),
    endpoint(
        "get_periodical_editions", "get", "periodicals/{seriesId}/editions",
        required="seriesId", optional=LIST_OPTIONS,
        record=PeriodicalEditionList, reference_id="_periodical-editions",
    ),
    endpoint(
        "update_periodical_edition", "put", "periodicals/{seriesId}/editions/{editionId}",
        required="seriesId editionId", optional="editionName publicationDate expirationDate",
        record=PeriodicalEdition, reference_id="_periodical-edition-edit-metadata",
        role="catalogAdmin",
    ),
    endpoint(
        "download_periodical_edition", "get", "periodicals/{seriesId}/editions/{editionId}/{format}",
        required="seriesId editionId format", optional="forUser", alias={"fmt": "format"},
        record=StatusModel, reference_id="_periodical-edition-download",
    ),
    endpoint(
        "get_my_periodicals", "get", "myPeriodicals",
        optional=LIST_OPTIONS,
        record=PeriodicalSeriesMetadataSummaryList, reference_id="_get-my-periodical-subscriptions",
    ),
    endpoint(
        "subscribe_my_periodical", "post", "myPeriodicals",
        required="seriesId format",
        record=PeriodicalSeriesMetadataSummaryList, reference_id="_subscribe-my-periodical",
    ),
    endpoint(
        "unsubscribe_my_periodical", "delete", "myPeriodicals/{seriesId}",
        required="seriesId",
        record=PeriodicalSeriesMetadataSummaryList, reference_id="_unsubscribe-my-periodical",
    ),
    endpoint(
        "get_periodical_subscriptions", "get", "accounts/{userIdentifier}/periodicals",
        required="userIdentifier", optional=LIST_OPTIONS, alias=USER_ALIAS,
        record=PeriodicalSeriesMetadataSummaryList, reference_id="_get-periodical-subscriptions",
        role="membership",
    ),
    endpoint(
        "subscribe_periodical", "post", "accounts/{userIdentifier}/periodicals",
        required="userIdentifier seriesId format", alias=USER_ALIAS,
        record=PeriodicalSeriesMetadataSummaryList, reference_id="_subscribe-periodical",
        role="membership",
    ),
    endpoint(
        "unsubscribe_periodical", "delete", "accounts/{userIdentifier}/periodicals/{seriesId}",
        required="userIdentifier seriesId", alias=USER_ALIAS,
        record=PeriodicalSeriesMetadataSummaryList, reference_id="_unsubscribe-periodical",
        role="membership",
    ),
)


class PeriodicalEndpoints(EndpointGroup):
    endpoints = EndpointRegistry(ENDPOINTS)
    error_kind = ErrorKind.PERIODICAL
    message_table = PERIODICAL_TABLE

    def get_periodicals(self, **opt) -> PeriodicalSeriesMetadataSummaryList:
        """GET /v2/periodicals"""
        return self.call("get_periodicals", **opt)

    def get_periodical(self, seriesId: Optional[str] = None) -> PeriodicalSeriesMetadataSummary:
        """GET /v2/periodicals/{seriesId}"""
        return self.call("get_periodical", seriesId=seriesId)

    def update_periodical(self, seriesId: Optional[str] = None, **opt) -> PeriodicalSeriesMetadataSummary:
        """PUT /v2/periodicals/{seriesId}"""
        return self.call("update_periodical", seriesId=seriesId, **opt)

    def get_periodical_editions(self, seriesId: Optional[str] = None, **opt) -> PeriodicalEditionList:
        """GET /v2/periodicals/{seriesId}/editions"""
        return self.call("get_periodical_editions", seriesId=seriesId, **opt)

    def update_periodical_edition(
        self, seriesId: Optional[str] = None, editionId: Optional[str] = None, **opt
    ) -> PeriodicalEdition:
        """PUT /v2/periodicals/{seriesId}/editions/{editionId}"""
        return self.call("update_periodical_edition", seriesId=seriesId, editionId=editionId, **opt)

    def download_periodical_edition(
        self,
        seriesId: Optional[str] = None,
        editionId: Optional[str] = None,
        format: Optional[str] = None,
        **opt,
    ) -> StatusModel:
        """GET /v2/periodicals/{seriesId}/editions/{editionId}/{format}"""
        return self.call(
            "download_periodical_edition", seriesId=seriesId, editionId=editionId, format=format, **opt
        )

    # =========================================================================
    # Subscriptions of the current user
    # =========================================================================

    def get_my_periodicals(self, **opt) -> PeriodicalSeriesMetadataSummaryList:
        """GET /v2/myPeriodicals"""
        return self.call("get_my_periodicals", **opt)

    def subscribe_my_periodical(
        self, seriesId: Optional[str] = None, format: Optional[str] = None
    ) -> PeriodicalSeriesMetadataSummaryList:
        """POST /v2/myPeriodicals"""
        return self.call("subscribe_my_periodical", seriesId=seriesId, format=format)

    def unsubscribe_my_periodical(self, seriesId: Optional[str] = None) -> PeriodicalSeriesMetadataSummaryList:
        """DELETE /v2/myPeriodicals/{seriesId}"""
        return self.call("unsubscribe_my_periodical", seriesId=seriesId)

    # =========================================================================
    # Subscriptions of other users (membership assistants)
    # =========================================================================

    def get_periodical_subscriptions(self, user: Any = None, **opt) -> PeriodicalSeriesMetadataSummaryList:
        """GET /v2/accounts/{userIdentifier}/periodicals"""
        return self.call("get_periodical_subscriptions", userIdentifier=self.user_id(user), **opt)

    def subscribe_periodical(
        self, user: Any = None, seriesId: Optional[str] = None, format: Optional[str] = None
    ) -> PeriodicalSeriesMetadataSummaryList:
        """POST /v2/accounts/{userIdentifier}/periodicals"""
        return self.call(
            "subscribe_periodical", userIdentifier=self.user_id(user), seriesId=seriesId, format=format
        )

    def unsubscribe_periodical(
        self, user: Any = None, seriesId: Optional[str] = None
    ) -> PeriodicalSeriesMetadataSummaryList:
        """DELETE /v2/accounts/{userIdentifier}/periodicals/{seriesId}"""
        return self.call("unsubscribe_periodical", userIdentifier=self.user_id(user), seriesId=seriesId)
