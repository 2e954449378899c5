class AppStatusCode:
    # Success
    DATA_RETRIEVED_SUCCESSFULLY = "100"
    OPERATION_SUCCESSFUL = "101"
    REQUEST_ALREADY_PENDING = "102"
    ALREADY_A_MEMBER = "103"
    VOTE_IGNORED = "104"
    DECISION_IGNORED = "105"

    # Generic failures
    OPERATION_FAILED = "200"
    OPERATION_ERROR = "201"
    INVALID_INPUT = "202"
    NOT_FOUND = "203"

    # Authentication
    AUTHENTICATION_TOKEN_INVALID = "300"
    AUTHENTICATION_TOKEN_EXPIRED = "301"
    AUTHENTICATION_USER_INVALID = "302"
    AUTHENTICATION_FORBIDDEN = "303"

    # Membership
    ORGANIZATION_NOT_FOUND = "400"
    REQUESTER_NOT_FOUND = "401"
    JOIN_REQUEST_NOT_FOUND = "402"
    NOT_A_LEADER = "403"

    # Gate pass
    HOST_NOT_FOUND = "500"
    VISITOR_NOT_FOUND = "501"
    INVITATION_NOT_FOUND = "502"
    PROFILE_INCOMPLETE = "503"
    ACCESS_CODE_INVALID = "504"
    ACCESS_CODE_EXHAUSTED = "505"
    PREMISE_NOT_FOUND = "506"
