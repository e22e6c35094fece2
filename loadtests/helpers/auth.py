"""Bearer tokens for simulated shoppers, signed with the server's JWT_SECRET."""

import uuid

from bookstore.api.identity import issue_token


def shopper_headers(user_id: str | None = None) -> tuple[str, dict]:
    user_id = user_id or f"load-{uuid.uuid4().hex[:10]}"
    return user_id, {"Authorization": f"Bearer {issue_token(user_id)}"}


def guest_headers() -> dict:
    return {"x-guest-id": str(uuid.uuid4())}
