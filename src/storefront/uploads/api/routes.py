"""FastAPI routes for image uploads (multipart/form-data)."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, File, Form, UploadFile

from storefront import config
from storefront.api.deps import current_actor, staff_actor
from storefront.api.envelope import Envelope, ok
from storefront.shared.access import Actor
from storefront.shared.errors import DomainError
from storefront.uploads.storage import delete_image, store_image

upload_router = APIRouter(prefix="/upload", tags=["uploads"])


@upload_router.post("/image", status_code=201, response_model=Envelope)
async def upload_image(
    file: UploadFile = File(...),
    folder: str = Form(default="images"),
    actor: Actor = Depends(current_actor),
) -> Envelope:
    # Read one byte past the limit so oversized files are rejected without buffering them whole.
    data = await file.read(config.UPLOAD_MAX_BYTES + 1)
    if len(data) > config.UPLOAD_MAX_BYTES:
        raise DomainError(f"File exceeds the maximum size of {config.UPLOAD_MAX_BYTES} bytes", field="file")

    stored = store_image(data, file.filename, file.content_type, folder)
    return ok(asdict(stored), "File uploaded")


@upload_router.delete("/{folder}/{file_name}", response_model=Envelope)
async def remove_image(folder: str, file_name: str, actor: Actor = Depends(staff_actor)) -> Envelope:
    delete_image(folder, file_name)
    return ok(message="File deleted")
