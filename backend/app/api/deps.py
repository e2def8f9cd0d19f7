"""
Shared route dependencies.
"""

from typing import Optional

from fastapi import File, Form, UploadFile

from app.core.config import get_settings
from app.services.upload_service import CloudinaryUploader


def get_image_uploader() -> CloudinaryUploader:
    return CloudinaryUploader.from_settings(get_settings())


class EventForm:
    """
    Raw multipart fields for event creation.

    Every field is optional at this layer: missing fields are collected by
    the event validator into a single 400 instead of FastAPI's 422.
    """

    def __init__(
        self,
        title: Optional[str] = Form(None),
        description: Optional[str] = Form(None),
        overview: Optional[str] = Form(None),
        venue: Optional[str] = Form(None),
        location: Optional[str] = Form(None),
        date: Optional[str] = Form(None),
        time: Optional[str] = Form(None),
        mode: Optional[str] = Form(None),
        audience: Optional[str] = Form(None),
        organizer: Optional[str] = Form(None),
        tags: Optional[str] = Form(None),
        agenda: Optional[str] = Form(None),
        image: Optional[UploadFile] = File(None),
    ):
        self.fields = {
            "title": title,
            "description": description,
            "overview": overview,
            "venue": venue,
            "location": location,
            "date": date,
            "time": time,
            "mode": mode,
            "audience": audience,
            "organizer": organizer,
            "tags": tags,
            "agenda": agenda,
        }
        self.image = image
