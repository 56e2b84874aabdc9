"""Capability mixin for host models that carry translations.

The mixin adds no translation logic of its own. Each instance holds a
``TranslationResolver`` (``instance.translations``) that does the work.

    class Article(TranslatableMixin, db.Model):
        __translatable__ = ('title', 'slug', 'content')

        id = db.Column(db.Integer, primary_key=True)

    article.translations.set_translation('title', 'Hello', 'en')
    db.session.commit()   # pending translations are saved by the commit hook
"""

from sqlalchemy import event

from translatable import db


def get_translation_type(model) -> str:
    """Discriminator stored in ``translatable_type`` for a model class or instance."""
    cls = model if isinstance(model, type) else type(model)
    return getattr(cls, '__translation_type__', None) or cls.__name__


class TranslatableMixin:
    """Gives a model a per-instance translation resolver."""

    # Explicit translatable fields; None means auto-detect from config
    __translatable__ = None
    # Value stored in translatable_type; defaults to the class name
    __translation_type__ = None

    @property
    def translation_type(self) -> str:
        return get_translation_type(self)

    @property
    def translations(self):
        resolver = getattr(self, '_translation_resolver', None)
        if resolver is None:
            from translatable import translations as extension
            resolver = extension.resolver_for(self)
            self._translation_resolver = resolver
        return resolver

    def get_translatable_fields(self) -> list:
        from translatable import translations as extension
        from translatable.services.resolver import translatable_fields_for
        return translatable_fields_for(self, extension.config)

    @classmethod
    def translation_stats(cls, locales=None) -> dict:
        """Entities of this model with a record per locale."""
        from translatable import translations as extension
        return extension.store.count_by_locale(get_translation_type(cls), locales)


# session.info key for resolvers whose writes are flushed but not yet committed
FLUSHED_RESOLVERS_KEY = 'translatable_flushed_resolvers'


def _pending_resolvers(session):
    candidates = list(session.new) + list(session.identity_map.values())
    resolvers = []
    for instance in candidates:
        resolver = getattr(instance, '_translation_resolver', None)
        if resolver is not None and resolver.has_pending() and not resolver.is_saving:
            resolvers.append(resolver)
    return resolvers


def save_pending_translations(session):
    """``before_commit`` listener: write staged translations in the same transaction."""
    resolvers = _pending_resolvers(session)
    if not resolvers:
        return

    # New entities need their primary keys before translations can reference them
    session.flush()
    flushed = session.info.setdefault(FLUSHED_RESOLVERS_KEY, [])
    for resolver in resolvers:
        if resolver.save_translations(commit=False) and resolver not in flushed:
            flushed.append(resolver)


def confirm_saved_translations(session):
    """``after_commit`` listener: flushed translations are durable now."""
    from translatable.services.store import run_deferred_invalidations

    for resolver in session.info.pop(FLUSHED_RESOLVERS_KEY, []):
        resolver.confirm_flushed()
    run_deferred_invalidations(session)


def release_saved_translations(session, previous_transaction):
    """``after_soft_rollback`` listener: the flushed writes are gone, keep them pending."""
    from translatable.services.store import run_deferred_invalidations

    for resolver in session.info.pop(FLUSHED_RESOLVERS_KEY, []):
        resolver.discard_flushed()
    run_deferred_invalidations(session)


_SESSION_LISTENERS = (
    ('before_commit', save_pending_translations),
    ('after_commit', confirm_saved_translations),
    ('after_soft_rollback', release_saved_translations),
)


def register_save_hook(session=None):
    target = session if session is not None else db.session
    for name, listener in _SESSION_LISTENERS:
        if not event.contains(target, name, listener):
            event.listen(target, name, listener)
