"""
Document parsing API endpoints.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, File, HTTPException, UploadFile, status
from pydantic import BaseModel, Field

from weekgrid.core.logger import setup_logger
from weekgrid.models.project import Project
from weekgrid.models.routine import Routine
from weekgrid.services.project_parser import parse_project
from weekgrid.services.routine_parser import is_routine_document, parse_routine

logger = setup_logger(__name__)

router = APIRouter()


class ParseResponse(BaseModel):
    projects: list[Project] = Field(default_factory=list)
    routines: list[Routine] = Field(default_factory=list)


def parse_documents(documents: list[tuple[str, str]]) -> ParseResponse:
    """Split (filename, content) pairs into projects and routines."""
    response = ParseResponse()
    for filename, content in documents:
        if is_routine_document(content):
            response.routines.append(parse_routine(content, filename))
        else:
            response.projects.append(parse_project(content, filename))
    logger.info(
        f"Parsed {len(documents)} documents: "
        f"{len(response.projects)} projects, {len(response.routines)} routines"
    )
    return response


@router.post("", response_model=ParseResponse)
async def parse_files(files: Optional[list[UploadFile]] = File(None)):
    """Parse uploaded Markdown documents."""
    if not files:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No files uploaded",
        )

    documents = []
    for upload in files:
        raw = await upload.read()
        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{upload.filename} is not UTF-8 text",
            )
        documents.append((upload.filename or "untitled.md", content))
    return parse_documents(documents)
