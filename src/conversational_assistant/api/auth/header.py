from fastapi import FastAPI, HTTPException, Request, status

from conversational_assistant.api.auth.base import AuthProvider

USER_ID_HEADER = "X-User-Id"


class HeaderAuthProvider(AuthProvider):
    """Reads the user id from a request header populated by an upstream authenticating proxy."""

    def __init__(self, header_name: str = USER_ID_HEADER) -> None:
        self.header_name = header_name

    def get_current_user_id(self, request: Request) -> str:
        user_id = request.headers.get(self.header_name, "").strip()
        if not user_id:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
        return user_id

    def bind_to_app(self, app: FastAPI) -> None:
        app.state.auth_provider = self
