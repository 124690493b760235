from fastapi import HTTPException


def server_error(error: object) -> HTTPException:
    """UpstreamFailure: 500 avec le message amont transmis au client."""
    message = getattr(error, "user_message", None) or getattr(error, "message", None) or str(error)
    return HTTPException(status_code=500, detail={"message": "Server error", "error": str(message)})
