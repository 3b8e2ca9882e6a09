"""Shared endpoints: video upload."""

import logging
from pathlib import Path
from uuid import uuid4

from fastapi import APIRouter, File, UploadFile

from ..auth.dependencies import CurrentUser
from ..config import get_settings
from ..errors.problem_details import PayloadTooLargeError, UnsupportedMediaTypeError
from ..models.movies import UploadedVideo


logger = logging.getLogger(__name__)

ALLOWED_VIDEO_TYPES = ("video/mp4",)
CHUNK_SIZE = 1024 * 1024

router = APIRouter(
    prefix="/common",
    tags=["Common"],
    responses={401: {"description": "Unauthorized"}}
)


@router.post(
    "/video",
    response_model=UploadedVideo,
    status_code=201,
    summary="Upload a movie video",
    description="Store an mp4 video in the upload folder. Pass the returned filename as movieFileName when creating a movie.",
    responses={
        413: {"description": "Payload Too Large"},
        415: {"description": "Unsupported Media Type - Only mp4 is accepted"}
    }
)
async def upload_video(user: CurrentUser, video: UploadFile = File(...)) -> UploadedVideo:
    """Stream an uploaded video to disk under a random name.

    Raises:
        UnsupportedMediaTypeError: If the file is not an mp4 video
        PayloadTooLargeError: If the file exceeds the configured size limit
    """
    settings = get_settings()

    if video.content_type not in ALLOWED_VIDEO_TYPES:
        raise UnsupportedMediaTypeError(
            f"Only mp4 videos can be uploaded, got '{video.content_type}'"
        )

    folder = Path(settings.upload_temp_folder)
    folder.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid4()}.mp4"
    destination = folder / filename

    size = 0
    try:
        with destination.open("wb") as out:
            while True:
                chunk = await video.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > settings.max_video_size_bytes:
                    raise PayloadTooLargeError(
                        f"Videos may be at most {settings.max_video_size_bytes} bytes"
                    )
                out.write(chunk)
    except Exception:
        destination.unlink(missing_ok=True)
        raise
    finally:
        await video.close()

    logger.info(f"User {user.id} uploaded {filename} ({size} bytes)")
    return UploadedVideo(filename=filename)
