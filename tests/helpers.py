"""Request helpers shared by the API tests."""

from app.core.auth import create_jwt


def bearer(user_id: str, **claims) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_jwt(user_id, **claims)}"}
