"""
Tests for the translations HTTP endpoints.
"""

from faker import Faker

fake = Faker()


class TestHealth:
    """Tests for GET /health"""

    def test_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.json['status'] == 'ok'


class TestGetEntityTranslations:
    """Tests for GET /api/translations/<type>/<id>"""

    def test_returns_all_fields(self, client, store):
        store.bulk_set('Article', 1, 'en', {'title': 'Hello', 'content': 'Body'})

        response = client.get('/api/translations/Article/1?locale=en')

        assert response.status_code == 200
        assert response.json['locale'] == 'en'
        assert response.json['translations'] == {'title': 'Hello', 'content': 'Body'}

    def test_accept_language_picks_locale(self, client, store):
        store.set('Article', 1, 'fr', 'title', 'Bonjour')

        response = client.get('/api/translations/Article/1', headers={'Accept-Language': 'fr-FR,fr;q=0.9'})

        assert response.status_code == 200
        assert response.json['locale'] == 'fr'
        assert response.json['translations'] == {'title': 'Bonjour'}

    def test_defaults_to_default_locale(self, client, store):
        response = client.get('/api/translations/Article/1')

        assert response.status_code == 200
        assert response.json['locale'] == 'ar'
        assert response.json['translations'] == {}

    def test_unsupported_locale_rejected(self, client, store):
        response = client.get('/api/translations/Article/1?locale=de')

        assert response.status_code == 400
        assert response.json['value'] == 'de'
        assert response.json['allowed'] == ['ar', 'en', 'fr']


class TestGetEntityTranslation:
    """Tests for GET /api/translations/<type>/<id>/<field>"""

    def test_returns_value(self, client, store):
        store.set('Article', 1, 'en', 'title', 'Hello')

        response = client.get('/api/translations/Article/1/title?locale=en')

        assert response.status_code == 200
        assert response.json == {'field': 'title', 'value': 'Hello', 'locale': 'en'}

    def test_falls_back_to_default_locale(self, client, store):
        store.set('Article', 1, 'ar', 'title', 'مرحبا')

        response = client.get('/api/translations/Article/1/title?locale=fr')

        assert response.status_code == 200
        assert response.json['value'] == 'مرحبا'
        assert response.json['locale'] == 'ar'

    def test_fallback_disabled(self, client, store):
        store.set('Article', 1, 'ar', 'title', 'مرحبا')

        response = client.get('/api/translations/Article/1/title?locale=fr&fallback=false')

        assert response.status_code == 404

    def test_unknown_field(self, client, store):
        response = client.get('/api/translations/Article/1/price?locale=en')

        assert response.status_code == 400
        assert response.json['value'] == 'price'
        assert 'title' in response.json['allowed']


class TestPutEntityTranslations:
    """Tests for PUT /api/translations/<type>/<id>"""

    def test_upserts_fields(self, client, store):
        title = fake.sentence(nb_words=4)

        response = client.put('/api/translations/Article/1', json={
            'locale': 'en',
            'translations': {'title': title, 'body': 'Text', 'price': '10'},
        })

        assert response.status_code == 200
        assert response.json['written'] == ['title', 'body']
        assert response.json['skipped'] == ['price']
        assert response.json['translations'] == {'title': title, 'body': 'Text'}
        assert store.get('Article', 1, 'en', 'title') == title

    def test_invalid_locale(self, client, store):
        response = client.put('/api/translations/Article/1', json={
            'locale': 'de',
            'translations': {'title': 'Hallo'},
        })

        assert response.status_code == 400
        assert response.json['value'] == 'de'

    def test_empty_body(self, client, store):
        response = client.put('/api/translations/Article/1', json={'locale': 'en'})

        assert response.status_code == 400


class TestBulkGet:
    """Tests for POST /api/translations/bulk"""

    def test_one_entry_per_item(self, client, store):
        store.set('Article', 1, 'en', 'title', 'One')
        store.set('Article', 2, 'en', 'title', 'Two')

        response = client.post('/api/translations/bulk', json={
            'items': [{'type': 'Article', 'id': 2}, {'type': 'Article', 'id': 3}, {'type': 'Article', 'id': 1}],
            'locale': 'en',
        })

        assert response.status_code == 200
        results = response.json['results']
        assert [r['translatable_id'] for r in results] == [2, 3, 1]
        assert [r['translations'] for r in results] == [{'title': 'Two'}, {}, {'title': 'One'}]

    def test_items_must_be_a_list(self, client, store):
        response = client.post('/api/translations/bulk', json={'items': 'Article:1'})

        assert response.status_code == 400

    def test_bad_item(self, client, store):
        response = client.post('/api/translations/bulk', json={'items': [{'type': 'Article'}], 'locale': 'en'})

        assert response.status_code == 400


class TestStats:
    """Tests for GET /api/translations/stats/<type>"""

    def test_counts_per_locale(self, client, store):
        store.set('Article', 1, 'en', 'title', 'One')
        store.set('Article', 2, 'en', 'title', 'Two')
        store.set('Article', 2, 'fr', 'title', 'Deux')

        response = client.get('/api/translations/stats/Article')

        assert response.status_code == 200
        assert response.json['stats'] == {'ar': 0, 'en': 2, 'fr': 1}

    def test_selected_locales(self, client, store):
        response = client.get('/api/translations/stats/Article?locales=en,fr')

        assert response.json['stats'] == {'en': 0, 'fr': 0}
