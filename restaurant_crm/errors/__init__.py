# Errors package init
"""
Restaurant CRM Backend - Error Handling Package
================================================

What:  Turns any failure raised while handling a request into the uniform
       JSON error body.

Modules:
    - catalog.py:     ErrorCode → (status, message)
    - responder.py:   ErrorDetails builders + JSONResponse rendering
    - classifier.py:  exception → FailureKind, validation map, constraint
                      classification
    - handlers.py:    ErrorHook and its registration on the app
"""
