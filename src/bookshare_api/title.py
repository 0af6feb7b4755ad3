"""
Title endpoints.

A title is a unique entry in the Bookshare collection. Any user can request
title metadata, but a file download depends on the user's subscription and
on the formats available for the title.
"""

from typing import Optional

from .endpoints import LIST_OPTIONS, EndpointGroup
from .errors import ErrorKind, domain_table
from .models import (
    CategoriesList,
    ResourceFileList,
    StatusModel,
    TitleCount,
    TitleMetadataDetail,
    TitleMetadataSummaryList,
)
from .parameters import EndpointRegistry, endpoint

TITLE_TABLE = domain_table()

FORMAT_ALIAS = {"fmt": "format"}

# Search fields whose list values are sent as space-separated quoted terms
MULTIVALUED_FIELDS = ("author", "narrator", "composer")

TITLE_SEARCH_OPTIONS = (
    "title", "author", "narrator", "composer", "keyword", "isbn", "categories",
    "language", "country", "format", "narratorType", "brailleType", "readingAge",
    "excludedContentWarnings", "includedContentWarnings", "externalIdentifierCode",
    "maxDuration", "titleContentType", *LIST_OPTIONS,
)

ENDPOINTS = (
    endpoint(
        "get_title_count", "get", "titles/count",
        record=TitleCount, reference_id="_title-count", role="anonymous",
    ),
    endpoint(
        "get_title", "get", "titles/{bookshareId}",
        required="bookshareId",
        record=TitleMetadataDetail, reference_id="_title-metadata", role="anonymous",
    ),
    endpoint(
        "download_title", "get", "titles/{bookshareId}/{format}",
        required="bookshareId format", optional="forUser", alias=FORMAT_ALIAS,
        record=StatusModel, reference_id="_title-download",
    ),
    endpoint(
        "get_titles", "get", "titles",
        optional=TITLE_SEARCH_OPTIONS, quoted=MULTIVALUED_FIELDS,
        multi="excludedContentWarnings includedContentWarnings", alias=FORMAT_ALIAS,
        record=TitleMetadataSummaryList, reference_id="_title-search", role="anonymous",
    ),
    endpoint(
        "get_artifact_metadata", "get", "titles/{bookshareId}",
        required="bookshareId format", alias=FORMAT_ALIAS,
        record=TitleMetadataDetail,
    ),
    endpoint(
        "get_title_resource_files", "get", "titles/{bookshareId}/{format}/resources",
        required="bookshareId format", optional="start", alias=FORMAT_ALIAS,
        record=ResourceFileList, reference_id="_get-title-file-resource-list",
    ),
    endpoint(
        "get_title_resource_file", "get", "titles/{bookshareId}/{format}/resources/{resourceId}",
        required="bookshareId format resourceId", alias=FORMAT_ALIAS,
        record=StatusModel, reference_id="_get-title-file-resource",
    ),
    endpoint(
        "get_categories", "get", "categories",
        optional="start limit",
        record=CategoriesList, reference_id="_categories", role="anonymous",
    ),
    endpoint(
        "get_catalog", "get", "catalog",
        optional=("country", "isbn", *LIST_OPTIONS),
        record=TitleMetadataSummaryList, reference_id="_catalog-search", role="catalogAdmin",
    ),
)


class TitleEndpoints(EndpointGroup):
    endpoints = EndpointRegistry(ENDPOINTS)
    error_kind = ErrorKind.TITLE
    message_table = TITLE_TABLE

    def get_title_count(self, **opt) -> TitleCount:
        """GET /v2/titles/count"""
        return self.call("get_title_count", **opt)

    def get_title(self, bookshareId: Optional[str] = None, **opt) -> TitleMetadataDetail:
        """GET /v2/titles/{bookshareId}"""
        return self.call("get_title", bookshareId=bookshareId, **opt)

    def download_title(self, bookshareId: Optional[str] = None, format: Optional[str] = None, **opt) -> StatusModel:
        """GET /v2/titles/{bookshareId}/{format}"""
        return self.call("download_title", bookshareId=bookshareId, format=format, **opt)

    def get_titles(self, **opt) -> TitleMetadataSummaryList:
        """
        GET /v2/titles

        Search the collection. A list given for "author", "narrator" or
        "composer" matches titles with all of the given names.
        """
        return self.call("get_titles", **opt)

    def get_artifact_metadata(self, bookshareId: Optional[str] = None, format: Optional[str] = None) -> Optional[dict]:
        """
        The entry for *format* in the formats of a title, or None if the title
        is not available in that format.

        This is not a Bookshare API request; it is derived from get_title.
        """
        title = self.get_title(bookshareId=bookshareId)
        for artifact in title.formats:
            if isinstance(artifact, dict) and format in (artifact.get("formatId"), artifact.get("name")):
                return artifact
        return None

    def get_title_resource_files(
        self, bookshareId: Optional[str] = None, format: Optional[str] = None, **opt
    ) -> ResourceFileList:
        """GET /v2/titles/{bookshareId}/{format}/resources"""
        return self.call("get_title_resource_files", bookshareId=bookshareId, format=format, **opt)

    def get_title_resource_file(
        self,
        bookshareId: Optional[str] = None,
        format: Optional[str] = None,
        resourceId: Optional[str] = None,
        **opt,
    ) -> StatusModel:
        """GET /v2/titles/{bookshareId}/{format}/resources/{resourceId}"""
        return self.call(
            "get_title_resource_file",
            bookshareId=bookshareId, format=format, resourceId=resourceId, **opt,
        )

    def get_categories(self, **opt) -> CategoriesList:
        """GET /v2/categories"""
        return self.call("get_categories", **opt)

    def get_catalog(self, **opt) -> TitleMetadataSummaryList:
        """
        GET /v2/catalog

        Catalog administrators can also see titles which are not live, such
        as withdrawn or pending titles.
        """
        return self.call("get_catalog", **opt)
