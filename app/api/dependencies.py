from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.services.chat import AdmissionError, ChatHub, Participant, admit

bearer_scheme = HTTPBearer(auto_error=False)


def get_chat_hub(request: Request) -> ChatHub:
    return request.app.state.chat


def get_current_participant(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> Participant:
    try:
        return admit(credentials.credentials if credentials else None)
    except AdmissionError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
