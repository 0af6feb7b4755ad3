"""Data models for API response bodies."""

import json
import logging
from typing import Any, Optional, Union

import requests
from pydantic import BaseModel, ConfigDict, Field

from .errors import ErrorKind, make_error

logger = logging.getLogger(__name__)

Body = Union[None, str, bytes, dict, list, requests.Response]


class ApiRecord(BaseModel):
    """
    Base for objects deserialized from API responses.

    Fields which are not declared are kept as extra attributes, so every
    member of the response body is reachable as ``record.<name>``.
    Construction through ``from_response`` never raises; a failure is
    reported through the ``error`` field instead.
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    error: Optional[Any] = Field(default=None, exclude=True)

    @classmethod
    def from_response(cls, response: Body, error: Optional[BaseException] = None):
        """Build a record from a response (or its body), carrying *error*."""
        if isinstance(response, requests.Response):
            response = response.text
        if isinstance(response, bytes):
            response = response.decode("utf-8", errors="replace")
        try:
            if response is None or (isinstance(response, str) and not response.strip()):
                record = cls()
            elif isinstance(response, str):
                record = cls.from_text(response)
            else:
                record = cls.from_data(response)
        except ValueError as e:
            logger.warning(f"{cls.__name__}: could not decode response: {e}")
            record = cls.model_construct()
            error = error or make_error(ErrorKind.PARSE, f"{cls.__name__}: {e}", cause=e)
        if error is not None and record.error is None:
            record.error = error
        return record

    @classmethod
    def from_text(cls, text: str):
        return cls.from_data(json.loads(text))

    @classmethod
    def from_data(cls, data: Any):
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return cls.model_validate(data)

    @property
    def blank(self) -> bool:
        """True if no data was received."""
        return not (self.model_fields_set - {"error"}) and not self.model_extra

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    def to_dict(self) -> dict:
        """The received data, without defaults for members that were absent."""
        return self.model_dump(exclude_unset=True, exclude={"error"})


# =============================================================================
# Common
# =============================================================================


class StatusModel(ApiRecord):
    """Generic status response; also accepts a non-JSON body as a message."""

    key: Optional[str] = None
    statusCode: Optional[int] = None
    messages: list[str] = Field(default_factory=list)

    @classmethod
    def from_text(cls, text: str):
        try:
            data = json.loads(text)
        except ValueError:
            return cls(messages=[text.strip()])
        return cls.from_data(data)


# =============================================================================
# Accounts
# =============================================================================


class UserIdentity(ApiRecord):
    username: Optional[str] = None


class AccountPreferences(ApiRecord):
    allowAdultContent: Optional[bool] = None
    showAllBooks: Optional[bool] = None
    language: Optional[str] = None
    format: Optional[str] = None
    brailleGrade: Optional[str] = None
    brailleFormat: Optional[str] = None
    brailleCellLineWidth: Optional[int] = None
    useUeb: Optional[bool] = None


class MyAccountSummary(ApiRecord):
    username: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    studentStatus: Optional[dict] = None
    canDownload: Optional[bool] = None


class UserAccount(ApiRecord):
    userAccountId: Optional[str] = None
    emailAddress: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    allowAdultContent: Optional[bool] = None
    hasAgreement: Optional[bool] = None
    deleted: Optional[bool] = None
    locked: Optional[bool] = None
    site: Optional[str] = None
    roles: list[str] = Field(default_factory=list)


class UserAccountList(ApiRecord):
    totalResults: Optional[int] = None
    next: Optional[str] = None
    userAccounts: list[UserAccount] = Field(default_factory=list)


class UserPod(ApiRecord):
    disabilityType: Optional[str] = None
    proofSource: Optional[str] = None


class UserPodList(ApiRecord):
    disabilities: list[UserPod] = Field(default_factory=list)


# =============================================================================
# Titles
# =============================================================================


class TitleMetadataSummary(ApiRecord):
    bookshareId: Optional[str] = None
    title: Optional[str] = None
    subtitle: Optional[str] = None
    authors: list[Any] = Field(default_factory=list)
    formats: list[Any] = Field(default_factory=list)
    isbn13: Optional[str] = None
    copyrightDate: Optional[str] = None


class TitleMetadataDetail(TitleMetadataSummary):
    synopsis: Optional[str] = None
    categories: list[Any] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    publisher: Optional[str] = None
    numPages: Optional[int] = None


class TitleMetadataSummaryList(ApiRecord):
    totalResults: Optional[int] = None
    next: Optional[str] = None
    titles: list[TitleMetadataSummary] = Field(default_factory=list)


class TitleCount(ApiRecord):
    """The body of a title count is a bare number."""

    count: Optional[int] = None

    @classmethod
    def from_data(cls, data: Any):
        if isinstance(data, int) and not isinstance(data, bool):
            return cls(count=data)
        return super().from_data(data)


class TitleDownload(ApiRecord):
    bookshareId: Optional[str] = None
    title: Optional[str] = None
    format: Optional[Any] = None
    status: Optional[str] = None
    downloadedBy: Optional[str] = None
    dateDownloaded: Optional[str] = None


class TitleDownloadList(ApiRecord):
    totalResults: Optional[int] = None
    next: Optional[str] = None
    titleDownloads: list[TitleDownload] = Field(default_factory=list)


class ResourceFile(ApiRecord):
    filename: Optional[str] = None
    size: Optional[int] = None
    mimeType: Optional[str] = None


class ResourceFileList(ApiRecord):
    totalResults: Optional[int] = None
    next: Optional[str] = None
    resourceFiles: list[ResourceFile] = Field(default_factory=list)


class CategoriesList(ApiRecord):
    totalResults: Optional[int] = None
    next: Optional[str] = None
    categories: list[Any] = Field(default_factory=list)


class ActiveBookList(ApiRecord):
    totalResults: Optional[int] = None
    next: Optional[str] = None
    activeBooks: list[dict] = Field(default_factory=list)


class AssignedTitleList(ApiRecord):
    totalResults: Optional[int] = None
    next: Optional[str] = None
    titles: list[TitleMetadataSummary] = Field(default_factory=list)


# =============================================================================
# Periodicals
# =============================================================================


class PeriodicalSeriesMetadataSummary(ApiRecord):
    seriesId: Optional[str] = None
    title: Optional[str] = None
    issn: Optional[str] = None
    description: Optional[str] = None
    publisher: Optional[str] = None
    editionCount: Optional[int] = None


class PeriodicalSeriesMetadataSummaryList(ApiRecord):
    totalResults: Optional[int] = None
    next: Optional[str] = None
    periodicals: list[PeriodicalSeriesMetadataSummary] = Field(default_factory=list)


class PeriodicalEdition(ApiRecord):
    editionId: Optional[str] = None
    editionName: Optional[str] = None
    publicationDate: Optional[str] = None


class PeriodicalEditionList(ApiRecord):
    totalResults: Optional[int] = None
    next: Optional[str] = None
    periodicalEditions: list[PeriodicalEdition] = Field(default_factory=list)


# =============================================================================
# Reading lists
# =============================================================================


class ReadingList(ApiRecord):
    readingListId: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    access: Optional[str] = None
    owner: Optional[str] = None
    memberCount: Optional[int] = None
    titleCount: Optional[int] = None


class ReadingListList(ApiRecord):
    totalResults: Optional[int] = None
    next: Optional[str] = None
    lists: list[ReadingList] = Field(default_factory=list)


class ReadingListTitlesList(ApiRecord):
    totalResults: Optional[int] = None
    next: Optional[str] = None
    titles: list[TitleMetadataSummary] = Field(default_factory=list)


# =============================================================================
# Subscriptions
# =============================================================================


class UserSubscription(ApiRecord):
    userSubscriptionId: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    userSubscriptionType: Optional[dict] = None
    numBooksAllowed: Optional[int] = None
    numBooksRemaining: Optional[int] = None
    notes: Optional[str] = None


class UserSubscriptionList(ApiRecord):
    totalResults: Optional[int] = None
    next: Optional[str] = None
    userSubscriptions: list[UserSubscription] = Field(default_factory=list)


class UserSubscriptionTypeList(ApiRecord):
    totalResults: Optional[int] = None
    next: Optional[str] = None
    userSubscriptionTypes: list[dict] = Field(default_factory=list)


# =============================================================================
# Organizations
# =============================================================================


class Organization(ApiRecord):
    organizationId: Optional[str] = None
    organizationName: Optional[str] = None
    organizationType: Optional[str] = None
    address: Optional[dict] = None
    phoneNumber: Optional[str] = None
    website: Optional[str] = None


class OrganizationTypeList(ApiRecord):
    organizationTypes: list[Any] = Field(default_factory=list)


# =============================================================================
# Agreements
# =============================================================================


class UserSignedAgreement(ApiRecord):
    agreementId: Optional[str] = None
    agreementType: Optional[str] = None
    dateSigned: Optional[str] = None
    expired: Optional[bool] = None
    printName: Optional[str] = None
    signedByLegalGuardian: Optional[bool] = None


class UserSignedAgreementList(ApiRecord):
    totalResults: Optional[int] = None
    next: Optional[str] = None
    signedAgreements: list[UserSignedAgreement] = Field(default_factory=list)


# =============================================================================
# OAuth
# =============================================================================


class OauthToken(ApiRecord):
    access_token: Optional[str] = None
    token_type: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    scope: Optional[str] = None

    @property
    def valid(self) -> bool:
        return self.error is None and bool(self.access_token)


class OauthTokenError(ApiRecord):
    """
    OAuth error body, e.g. {"error": "invalid_token", "error_description": ...}.

    The body's "error" string takes precedence over the exception passed to
    ``from_response``.
    """

    error_description: Optional[str] = None
