"""Reading list endpoints."""

from typing import Any, Optional

from .constants import MAX_LIMIT
from .endpoints import LIST_OPTIONS, USER_ALIAS, EndpointGroup
from .errors import ErrorKind, domain_table
from .models import ReadingList, ReadingListList, ReadingListTitlesList
from .parameters import EndpointRegistry, endpoint

READING_LIST_TABLE = domain_table()

ENDPOINTS = (
    endpoint(
        "get_my_reading_lists", "get", "mylists",
        optional=LIST_OPTIONS,
        record=ReadingListList, reference_id="_get-my-readinglists",
    ),
    endpoint(
        "create_reading_list", "post", "mylists",
        required="name", optional="description access",
        record=ReadingList, reference_id="_post-readinglist-create",
    ),
    endpoint(
        "subscribe_reading_list", "put", "mylists/{readingListId}/subscription",
        required="readingListId", optional="enabled",
        record=ReadingList, reference_id="_put-readinglist-subscribe",
    ),
    endpoint(
        "unsubscribe_reading_list", "put", "mylists/{readingListId}/subscription",
        required="readingListId", optional="enabled",
        record=ReadingList, reference_id="_put-readinglist-unsubscribe",
    ),
    endpoint(
        "get_reading_lists", "get", "lists",
        optional=LIST_OPTIONS,
        record=ReadingListList, reference_id="_get-readinglists",
    ),
    endpoint(
        "get_reading_list", "get", "lists/{readingListId}",
        required="readingListId",
        record=ReadingList,
    ),
    endpoint(
        "update_reading_list", "put", "lists/{readingListId}",
        required="readingListId", optional="name description access",
        record=ReadingList, reference_id="_put-readinglist-edit-metadata",
    ),
    endpoint(
        "get_reading_list_titles", "get", "lists/{readingListId}/titles",
        required="readingListId", optional=LIST_OPTIONS,
        record=ReadingListTitlesList, reference_id="_get-readinglist-titles",
    ),
    endpoint(
        "create_reading_list_title", "post", "lists/{readingListId}/titles",
        required="readingListId bookshareId",
        record=ReadingListTitlesList, reference_id="_post-readinglist-title",
    ),
    endpoint(
        "remove_reading_list_title", "delete", "lists/{readingListId}/titles/{bookshareId}",
        required="readingListId bookshareId",
        record=ReadingListTitlesList, reference_id="_delete-readinglist-title",
    ),
    endpoint(
        "get_user_reading_lists", "get", "accounts/{userIdentifier}/lists",
        required="userIdentifier", optional=LIST_OPTIONS, alias=USER_ALIAS,
        record=ReadingListList, reference_id="_get-member-readinglists", role="membership",
    ),
)


class ReadingListEndpoints(EndpointGroup):
    endpoints = EndpointRegistry(ENDPOINTS)
    error_kind = ErrorKind.READING_LIST
    message_table = READING_LIST_TABLE

    def get_my_reading_lists(self, **opt) -> ReadingListList:
        """GET /v2/mylists"""
        return self.call("get_my_reading_lists", **opt)

    def create_reading_list(self, name: Optional[str] = None, **opt) -> ReadingList:
        """POST /v2/mylists"""
        return self.call("create_reading_list", name=name, **opt)

    def subscribe_reading_list(self, readingListId: Optional[str] = None) -> ReadingList:
        """PUT /v2/mylists/{readingListId}/subscription"""
        return self.call("subscribe_reading_list", readingListId=readingListId, enabled=True)

    def unsubscribe_reading_list(self, readingListId: Optional[str] = None) -> ReadingList:
        """PUT /v2/mylists/{readingListId}/subscription"""
        return self.call("unsubscribe_reading_list", readingListId=readingListId, enabled=False)

    def get_reading_lists(self, **opt) -> ReadingListList:
        """GET /v2/lists"""
        return self.call("get_reading_lists", **opt)

    def get_reading_list(self, readingListId: Optional[str] = None) -> ReadingList:
        """
        Metadata for one reading list, found among all visible reading lists.

        This is not a Bookshare API request. The result is blank (and carries
        any error from the list request) if the reading list was not found.
        """
        lists = self.get_reading_lists(limit=MAX_LIMIT)
        for entry in lists.lists:
            if entry.readingListId == readingListId:
                return ReadingList.from_response(entry.to_dict())
        return ReadingList.from_response(None, error=lists.error)

    def update_reading_list(self, readingListId: Optional[str] = None, **opt) -> ReadingList:
        """PUT /v2/lists/{readingListId}"""
        return self.call("update_reading_list", readingListId=readingListId, **opt)

    def get_reading_list_titles(self, readingListId: Optional[str] = None, **opt) -> ReadingListTitlesList:
        """GET /v2/lists/{readingListId}/titles"""
        return self.call("get_reading_list_titles", readingListId=readingListId, **opt)

    def create_reading_list_title(
        self, readingListId: Optional[str] = None, bookshareId: Optional[str] = None
    ) -> ReadingListTitlesList:
        """POST /v2/lists/{readingListId}/titles"""
        return self.call("create_reading_list_title", readingListId=readingListId, bookshareId=bookshareId)

    def remove_reading_list_title(
        self, readingListId: Optional[str] = None, bookshareId: Optional[str] = None
    ) -> ReadingListTitlesList:
        """DELETE /v2/lists/{readingListId}/titles/{bookshareId}"""
        return self.call("remove_reading_list_title", readingListId=readingListId, bookshareId=bookshareId)

    def get_user_reading_lists(self, user: Any = None, **opt) -> ReadingListList:
        """GET /v2/accounts/{userIdentifier}/lists"""
        return self.call("get_user_reading_lists", userIdentifier=self.user_id(user), **opt)
