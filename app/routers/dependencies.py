from fastapi import Request

from app.utils.exceptions import AuthenticationError
from app.utils.utils import USER_ID_HEADER


async def get_current_user(request: Request) -> str:
    """Caller identity as forwarded by the upstream gateway"""
    user_id = (request.headers.get(USER_ID_HEADER) or "").strip()
    if not user_id:
        raise AuthenticationError(details={"header": USER_ID_HEADER})
    return user_id
