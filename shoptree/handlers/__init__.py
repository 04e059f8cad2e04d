"""ماژول هندلرها"""
from .base_handler import BaseHandler
from .category_organizer import CategoryOrganizerHandler, build_organizer_conversation

__all__ = [
    'BaseHandler',
    'CategoryOrganizerHandler',
    'build_organizer_conversation',
]
