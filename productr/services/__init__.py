from .auth import SessionGateway, UserStore
from .image_service import ImageFetcher, ImageSetReconciler
from .products import ProductGateway

__all__ = [
    "SessionGateway",
    "UserStore",
    "ImageFetcher",
    "ImageSetReconciler",
    "ProductGateway",
]
