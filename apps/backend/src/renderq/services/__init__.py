"""Services module for renderq."""

from renderq.services.gofile import GofileUploader
from renderq.services.interfaces import (
    CompositionHandle,
    IObjectStorage,
    IPrimaryUploader,
    IRenderInvoker,
    UploadResult,
)
from renderq.services.r2 import R2Storage
from renderq.services.remotion import RemotionRenderer
from renderq.services.upload import UploadCoordinator, convert_url

__all__ = [
    "CompositionHandle",
    "GofileUploader",
    "IObjectStorage",
    "IPrimaryUploader",
    "IRenderInvoker",
    "R2Storage",
    "RemotionRenderer",
    "UploadCoordinator",
    "UploadResult",
    "convert_url",
]
