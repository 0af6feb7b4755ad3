"""Account endpoints: the current user, user accounts, assigned titles and active books."""

from typing import Any, Optional

from .endpoints import LIST_OPTIONS, USER_ALIAS, EndpointGroup
from .errors import ErrorKind, domain_table
from .models import (
    AccountPreferences,
    ActiveBookList,
    AssignedTitleList,
    MyAccountSummary,
    StatusModel,
    TitleDownloadList,
    UserAccount,
    UserIdentity,
)
from .parameters import EndpointRegistry, endpoint

ACCOUNT_TABLE = domain_table()

ACCOUNT_REQUIRED = (
    "firstName", "lastName", "emailAddress", "address1", "city", "country", "postalCode",
)
ACCOUNT_OPTIONAL = (
    "phoneNumber", "address2", "state", "guardianFirstName", "guardianLastName",
    "dateOfBirth", "language", "allowAdultContent", "site", "role", "password",
)
PREFERENCES = (
    "allowAdultContent", "showAllBooks", "language", "format", "brailleGrade",
    "brailleFormat", "brailleCellLineWidth", "useUeb",
)

ENDPOINTS = (
    endpoint(
        "get_user_identity", "get", "me",
        record=UserIdentity, reference_id="_me",
    ),
    endpoint(
        "get_my_account", "get", "myaccount",
        record=MyAccountSummary, reference_id="_myaccount-summary",
    ),
    endpoint(
        "get_my_download_history", "get", "myaccount/history",
        optional=LIST_OPTIONS,
        record=TitleDownloadList, reference_id="_myaccount-downloads",
    ),
    endpoint(
        "get_my_preferences", "get", "myaccount/preferences",
        record=AccountPreferences, reference_id="_myaccount-preferences",
    ),
    endpoint(
        "update_my_preferences", "put", "myaccount/preferences",
        optional=PREFERENCES,
        record=AccountPreferences, reference_id="_myaccount-preferences-edit",
    ),
    endpoint(
        "get_account", "get", "accounts/{userIdentifier}",
        required="userIdentifier", alias=USER_ALIAS,
        record=UserAccount, reference_id="_user-account-search", role="membership",
    ),
    endpoint(
        "update_account", "put", "accounts/{userIdentifier}",
        required="userIdentifier", optional=(*ACCOUNT_REQUIRED, *ACCOUNT_OPTIONAL), alias=USER_ALIAS,
        record=UserAccount, reference_id="_update-useraccount", role="membership",
    ),
    endpoint(
        "create_account", "post", "accounts",
        required=ACCOUNT_REQUIRED, optional=ACCOUNT_OPTIONAL,
        record=UserAccount, reference_id="_create-useraccount", role="membership",
    ),
    endpoint(
        "update_account_password", "put", "accounts/{userIdentifier}/password",
        required="userIdentifier password", alias=USER_ALIAS,
        record=StatusModel, reference_id="_update-membership-password", role="membership",
    ),
    endpoint(
        "get_preferences", "get", "accounts/{userIdentifier}/preferences",
        required="userIdentifier", alias=USER_ALIAS,
        record=AccountPreferences, reference_id="_get-membership-preferences", role="membership",
    ),
    endpoint(
        "update_preferences", "put", "accounts/{userIdentifier}/preferences",
        required="userIdentifier", optional=PREFERENCES, alias=USER_ALIAS,
        record=AccountPreferences, reference_id="_put-membership-preferences", role="membership",
    ),
    endpoint(
        "get_my_assigned_titles", "get", "myAssignedTitles",
        optional=LIST_OPTIONS,
        record=AssignedTitleList, reference_id="_get-my-assigned-titles",
    ),
    endpoint(
        "get_assigned_titles", "get", "assignedTitles/{userIdentifier}",
        required="userIdentifier", optional=LIST_OPTIONS, alias=USER_ALIAS,
        record=AssignedTitleList, reference_id="_get-assigned-titles",
    ),
    endpoint(
        "create_assigned_title", "post", "assignedTitles/{userIdentifier}",
        required="userIdentifier bookshareId", alias=USER_ALIAS,
        record=StatusModel, reference_id="_assign-title",
    ),
    endpoint(
        "remove_assigned_title", "delete", "assignedTitles/{userIdentifier}/{bookshareId}",
        required="userIdentifier bookshareId", alias=USER_ALIAS,
        record=StatusModel, reference_id="_unassign-title",
    ),
    endpoint(
        "get_my_active_books", "get", "myActiveBooks",
        optional=LIST_OPTIONS,
        record=ActiveBookList, reference_id="_get-my-active-books",
    ),
    endpoint(
        "add_my_active_book", "post", "myActiveBooks",
        required="bookshareId format",
        record=ActiveBookList, reference_id="_add-my-active-book",
    ),
    endpoint(
        "remove_my_active_book", "delete", "myActiveBooks/{activeTitleId}",
        required="activeTitleId",
        record=ActiveBookList, reference_id="_remove-my-active-book",
    ),
    endpoint(
        "get_active_books", "get", "accounts/{userIdentifier}/activeBooks",
        required="userIdentifier", optional=LIST_OPTIONS, alias=USER_ALIAS,
        record=ActiveBookList, reference_id="_get-active-books", role="membership",
    ),
    endpoint(
        "create_active_book", "post", "accounts/{userIdentifier}/activeBooks",
        required="userIdentifier bookshareId format", alias=USER_ALIAS,
        record=ActiveBookList, reference_id="_add-active-book", role="membership",
    ),
    endpoint(
        "delete_active_book", "delete", "accounts/{userIdentifier}/activeBooks/{activeTitleId}",
        required="userIdentifier activeTitleId", alias=USER_ALIAS,
        record=ActiveBookList, reference_id="_remove-active-book", role="membership",
    ),
)


class AccountEndpoints(EndpointGroup):
    endpoints = EndpointRegistry(ENDPOINTS)
    error_kind = ErrorKind.ACCOUNT
    message_table = ACCOUNT_TABLE

    # =========================================================================
    # Current user
    # =========================================================================

    def get_user_identity(self) -> UserIdentity:
        """GET /v2/me"""
        return self.call("get_user_identity")

    def get_my_account(self) -> MyAccountSummary:
        """GET /v2/myaccount"""
        return self.call("get_my_account")

    def get_my_download_history(self, **opt) -> TitleDownloadList:
        """GET /v2/myaccount/history"""
        return self.call("get_my_download_history", **opt)

    def get_my_preferences(self) -> AccountPreferences:
        """GET /v2/myaccount/preferences"""
        return self.call("get_my_preferences")

    def update_my_preferences(self, **opt) -> AccountPreferences:
        """PUT /v2/myaccount/preferences"""
        return self.call("update_my_preferences", **opt)

    # =========================================================================
    # User accounts (membership assistants)
    # =========================================================================

    def get_account(self, user: Any = None) -> UserAccount:
        """GET /v2/accounts/{userIdentifier}"""
        return self.call("get_account", userIdentifier=self.user_id(user))

    def update_account(self, user: Any = None, **opt) -> UserAccount:
        """PUT /v2/accounts/{userIdentifier}"""
        return self.call("update_account", userIdentifier=self.user_id(user), **opt)

    def create_account(
        self,
        firstName: Optional[str] = None,
        lastName: Optional[str] = None,
        emailAddress: Optional[str] = None,
        address1: Optional[str] = None,
        city: Optional[str] = None,
        country: Optional[str] = None,
        postalCode: Optional[str] = None,
        **opt,
    ) -> UserAccount:
        """POST /v2/accounts"""
        return self.call(
            "create_account",
            firstName=firstName,
            lastName=lastName,
            emailAddress=emailAddress,
            address1=address1,
            city=city,
            country=country,
            postalCode=postalCode,
            **opt,
        )

    def update_account_password(self, user: Any = None, password: Optional[str] = None) -> StatusModel:
        """PUT /v2/accounts/{userIdentifier}/password"""
        return self.call("update_account_password", userIdentifier=self.user_id(user), password=password)

    def get_preferences(self, user: Any = None) -> AccountPreferences:
        """GET /v2/accounts/{userIdentifier}/preferences"""
        return self.call("get_preferences", userIdentifier=self.user_id(user))

    def update_preferences(self, user: Any = None, **opt) -> AccountPreferences:
        """PUT /v2/accounts/{userIdentifier}/preferences"""
        return self.call("update_preferences", userIdentifier=self.user_id(user), **opt)

    # =========================================================================
    # Assigned titles
    # =========================================================================

    def get_my_assigned_titles(self, **opt) -> AssignedTitleList:
        """GET /v2/myAssignedTitles"""
        return self.call("get_my_assigned_titles", **opt)

    def get_assigned_titles(self, user: Any = None, **opt) -> AssignedTitleList:
        """GET /v2/assignedTitles/{userIdentifier}"""
        return self.call("get_assigned_titles", userIdentifier=self.user_id(user), **opt)

    def create_assigned_title(self, user: Any = None, bookshareId: Optional[str] = None) -> StatusModel:
        """POST /v2/assignedTitles/{userIdentifier}"""
        return self.call("create_assigned_title", userIdentifier=self.user_id(user), bookshareId=bookshareId)

    def remove_assigned_title(self, user: Any = None, bookshareId: Optional[str] = None) -> StatusModel:
        """DELETE /v2/assignedTitles/{userIdentifier}/{bookshareId}"""
        return self.call("remove_assigned_title", userIdentifier=self.user_id(user), bookshareId=bookshareId)

    # =========================================================================
    # Active books
    # =========================================================================

    def get_my_active_books(self, **opt) -> ActiveBookList:
        """GET /v2/myActiveBooks"""
        return self.call("get_my_active_books", **opt)

    def add_my_active_book(self, bookshareId: Optional[str] = None, format: Optional[str] = None) -> ActiveBookList:
        """POST /v2/myActiveBooks"""
        return self.call("add_my_active_book", bookshareId=bookshareId, format=format)

    def remove_my_active_book(self, activeTitleId: Optional[str] = None) -> ActiveBookList:
        """DELETE /v2/myActiveBooks/{activeTitleId}"""
        return self.call("remove_my_active_book", activeTitleId=activeTitleId)

    def get_active_books(self, user: Any = None, **opt) -> ActiveBookList:
        """GET /v2/accounts/{userIdentifier}/activeBooks"""
        return self.call("get_active_books", userIdentifier=self.user_id(user), **opt)

    def create_active_book(
        self, user: Any = None, bookshareId: Optional[str] = None, format: Optional[str] = None
    ) -> ActiveBookList:
        """POST /v2/accounts/{userIdentifier}/activeBooks"""
        return self.call(
            "create_active_book", userIdentifier=self.user_id(user), bookshareId=bookshareId, format=format
        )

    def delete_active_book(self, user: Any = None, activeTitleId: Optional[str] = None) -> ActiveBookList:
        """DELETE /v2/accounts/{userIdentifier}/activeBooks/{activeTitleId}"""
        return self.call("delete_active_book", userIdentifier=self.user_id(user), activeTitleId=activeTitleId)
