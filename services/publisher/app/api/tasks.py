"""Inbound task endpoint."""
from __future__ import annotations

import hmac
from typing import List

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import PublisherSettings, get_settings
from ..domain.dispatcher import TaskDispatcher
from ..domain.types import Attachment, Task
from .deps import get_dispatcher

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["tasks"])


class AttachmentPayload(BaseModel):
    name: str = Field(..., description="Attachment file name")
    url: str = Field(..., description="Data URI or URL of the attachment")


class TaskRequest(BaseModel):
    secret: str
    brief: str
    email: str
    task: str
    round: int
    nonce: str
    evaluation_url: str
    attachments: List[AttachmentPayload] = Field(default_factory=list)
    checks: List[str] = Field(default_factory=list)

    def to_task(self) -> Task:
        return Task(
            brief=self.brief,
            email=self.email,
            task=self.task,
            round=self.round,
            nonce=self.nonce,
            evaluation_url=self.evaluation_url,
            attachments=tuple(Attachment(name=item.name, url=item.url) for item in self.attachments),
            checks=tuple(self.checks),
        )


def _secret_matches(provided: str, settings: PublisherSettings) -> bool:
    expected = settings.security.shared_secret
    if not expected:
        logger.warning("tasks.secret_not_configured")
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


@router.post("/api-endpoint")
async def accept_task(
    request: TaskRequest,
    dispatcher: TaskDispatcher = Depends(get_dispatcher),
):
    try:
        if not _secret_matches(request.secret, get_settings()):
            logger.info("tasks.rejected", task=request.task, round=request.round)
            return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"error": "Invalid secret"})
        dispatcher.submit(request.to_task())
    except Exception:
        logger.exception("tasks.accept_failed", task=request.task)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )
    logger.info("tasks.accepted", task=request.task, round=request.round)
    return {"message": "Request received"}


__all__ = ["router", "TaskRequest"]
