"""
Tests for the TranslatableMixin and the commit hook that saves staged translations.
"""

import pytest
from sqlalchemy import event

from translatable import db
from translatable.models import Translation, register_save_hook
from translatable.models.mixins import (
    confirm_saved_translations,
    get_translation_type,
    release_saved_translations,
    save_pending_translations,
)
from translatable.services.resolver import TranslationResolver

from conftest import Article


class TestMixin:
    """Tests for the model-side capability"""

    def test_resolver_is_built_once(self, article):
        assert isinstance(article.translations, TranslationResolver)
        assert article.translations is article.translations

    def test_translation_type(self, article):
        assert article.translation_type == 'Article'
        assert get_translation_type(Article) == 'Article'

    def test_custom_translation_type(self, db_session):
        class Product:
            __translation_type__ = 'catalog.product'

        assert get_translation_type(Product) == 'catalog.product'
        assert get_translation_type(Product()) == 'catalog.product'

    def test_translation_stats(self, article, second_article, store):
        store.set('Article', article.id, 'en', 'title', 'One')
        store.set('Article', second_article.id, 'en', 'title', 'Two')
        store.set('Article', second_article.id, 'ar', 'title', 'اثنان')

        assert Article.translation_stats() == {'ar': 1, 'en': 2, 'fr': 0}


class TestSaveHook:
    """Staged translations are written when the session commits"""

    def test_new_entity_saved_with_translations(self, db_session, store):
        article = Article(name='New article')
        db.session.add(article)
        article.translations.set_for_locale('en', {'title': 'Hello', 'content': 'Body'})

        db.session.commit()

        assert article.id is not None
        assert not article.translations.has_pending()
        assert store.get_all('Article', article.id, 'en') == {'title': 'Hello', 'content': 'Body'}

    def test_existing_entity_saved_on_commit(self, article, store):
        article.translations.set_translation('title', 'Bonjour', 'fr')
        article.name = 'Renamed'

        db.session.commit()

        assert store.get('Article', article.id, 'fr', 'title') == 'Bonjour'

    def test_rollback_keeps_translations_pending(self, article, store):
        article.translations.set_translation('title', 'Bonjour', 'fr')

        db.session.rollback()

        assert article.translations.has_pending()
        assert Translation.find_for_locale('Article', article.id, 'fr') is None

    def test_explicit_save_is_not_repeated_by_hook(self, article, store):
        article.translations.set_translations({'title': 'Hello', 'slug': 'hello'}, 'en')

        assert article.translations.save_translations() == ['en']
        assert Translation.query.filter_by(translatable_id=article.id).count() == 1
        assert store.get('Article', article.id, 'en', 'slug') == 'hello'

    def test_failed_commit_keeps_translations_pending(self, article, store):
        article.translations.set_translation('title', 'Bonjour', 'fr')

        def _refuse_commit(session):
            raise RuntimeError('commit refused')

        event.listen(db.session, 'before_commit', _refuse_commit)
        try:
            with pytest.raises(RuntimeError):
                db.session.commit()
        finally:
            event.remove(db.session, 'before_commit', _refuse_commit)
        db.session.rollback()

        assert Translation.find_for_locale('Article', article.id, 'fr') is None
        assert article.translations.has_pending()

        db.session.commit()

        assert not article.translations.has_pending()
        assert store.get('Article', article.id, 'fr', 'title') == 'Bonjour'

    def test_cache_invalidated_after_commit(self, article, store):
        store.set('Article', article.id, 'fr', 'title', 'Ancien')
        key = store.cache.entity_key('Article', article.id, 'fr', 'title')
        article.translations.set_translation('title', 'Nouveau', 'fr')

        def _cache_old_value(session):
            store.cache.put(key, 'Ancien')

        event.listen(db.session, 'before_commit', _cache_old_value)
        try:
            db.session.commit()
        finally:
            event.remove(db.session, 'before_commit', _cache_old_value)

        assert store.get('Article', article.id, 'fr', 'title') == 'Nouveau'

    def test_hook_registered_once(self, app):
        register_save_hook()
        register_save_hook()

        assert event.contains(db.session, 'before_commit', save_pending_translations)
        assert event.contains(db.session, 'after_commit', confirm_saved_translations)
        assert event.contains(db.session, 'after_soft_rollback', release_saved_translations)
