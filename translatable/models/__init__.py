"""Database models for translation storage."""

from .translation import Translation, translations_view
from .mixins import TranslatableMixin, get_translation_type, register_save_hook

__all__ = [
    'Translation',
    'translations_view',
    'TranslatableMixin',
    'get_translation_type',
    'register_save_hook',
]
