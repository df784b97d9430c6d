class AppStatusCode:
    # Success
    DATA_RETRIEVED_SUCCESSFULLY = "100"
    OPERATION_SUCCESSFUL = "101"

    # Authentication
    AUTHENTICATION_TOKEN_MISSING = "200"
    AUTHENTICATION_TOKEN_INVALID = "201"
    AUTHENTICATION_TOKEN_EXPIRED = "202"
    AUTHENTICATION_USER_INVALID = "203"

    # Authorization
    AUTHORIZATION_ROLE_DENIED = "300"
    AUTHORIZATION_PARTNER_DENIED = "301"

    # Input / lookup
    INVALID_INPUT = "400"
    REQUIRED_FIELD_MISSING = "401"
    INVALID_STATUS_TRANSITION = "402"
    RECORD_NOT_FOUND = "404"

    # Webhooks
    WEBHOOK_SIGNATURE_INVALID = "450"
    WEBHOOK_NOT_CONFIGURED = "451"

    # Failures
    OPERATION_FAILED = "500"
    OPERATION_ERROR = "501"
    UPSTREAM_FAILURE = "502"
    DATABASE_ERROR = "503"
