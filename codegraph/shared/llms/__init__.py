from .models import get_translation_model

__all__ = [
    "get_translation_model",
]
