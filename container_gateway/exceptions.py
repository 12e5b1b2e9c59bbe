"""
HTTP-layer exceptions
"""

from fastapi import HTTPException, status


class InternalServiceError(HTTPException):
    """Core failure surfaced to a client"""

    def __init__(self, detail: str = "Internal service error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
        )
