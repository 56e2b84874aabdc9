"""Flask extension that wires config, cache and store into an app.

    translations = Translations()
    translations.init_app(app)

    translations.store.get('Article', 1, 'en', 'title')
    translations.resolver_for(article).get_translation('title')
"""

import logging

from flask import current_app

from translatable.config import load_translation_config
from translatable.services.cache import TranslationCache
from translatable.services.field_classifier import FieldClassifier

logger = logging.getLogger(__name__)


class TranslationsState:
    """Per-app objects, stored in ``app.extensions['translatable']``."""

    def __init__(self, config, classifier, cache, store):
        self.config = config
        self.classifier = classifier
        self.cache = cache
        self.store = store


class Translations:
    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        from translatable.locale import select_request_locale
        from translatable.models.mixins import register_save_hook
        # Imports the models, which registers the table and the view DDL
        from translatable.services.store import TranslationStore

        config = load_translation_config(app.config)
        classifier = FieldClassifier.from_config(config)
        cache = TranslationCache.from_config(config)
        store = TranslationStore(config, classifier, cache)

        app.extensions['translatable'] = TranslationsState(config, classifier, cache, store)
        app.before_request(select_request_locale)
        register_save_hook()

        logger.info(f"Translations initialised: {config!r}")

    @property
    def state(self) -> TranslationsState:
        return current_app.extensions['translatable']

    @property
    def config(self):
        return self.state.config

    @property
    def classifier(self):
        return self.state.classifier

    @property
    def cache(self):
        return self.state.cache

    @property
    def store(self):
        return self.state.store

    def resolver_for(self, entity, locale=None):
        from translatable.services.resolver import TranslationResolver
        return TranslationResolver(entity, self.store, locale)
