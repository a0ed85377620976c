"""Tests for workin_analytics.extensions — lazy client construction."""
from unittest.mock import MagicMock, patch

from workin_analytics import extensions


class TestRedisClient:

    @patch('workin_analytics.extensions.redis.from_url')
    def test_created_once(self, mock_from_url):
        with patch.object(extensions, '_redis_client', None):
            first = extensions.get_redis_client()
            second = extensions.get_redis_client()
        mock_from_url.assert_called_once_with(extensions.REDIS_URL, decode_responses=True)
        assert first is second is mock_from_url.return_value

    @patch('workin_analytics.extensions.redis.from_url', side_effect=ValueError('bad url'))
    def test_bad_url_logged(self, _from_url, caplog):
        with patch.object(extensions, '_redis_client', None):
            assert extensions.get_redis_client() is None
        assert 'Error initializing Redis client' in caplog.text


class TestFirestoreClient:

    @patch('workin_analytics.extensions.firestore')
    @patch('workin_analytics.extensions.credentials')
    @patch('workin_analytics.extensions.firebase_admin')
    def test_initializes_app_with_service_account(self, mock_admin, mock_credentials, mock_firestore):
        mock_admin.get_app.side_effect = ValueError('no app')
        with patch.object(extensions, '_firestore_client', None), \
                patch.object(extensions, 'FIREBASE_CREDENTIALS', '/secrets/sa.json'), \
                patch.object(extensions, 'FIREBASE_PROJECT_ID', None):
            client = extensions.get_firestore_client()

        mock_credentials.Certificate.assert_called_once_with('/secrets/sa.json')
        mock_admin.initialize_app.assert_called_once_with(mock_credentials.Certificate.return_value, None)
        assert client is mock_firestore.client.return_value

    @patch('workin_analytics.extensions.firestore')
    @patch('workin_analytics.extensions.firebase_admin')
    def test_reuses_existing_app(self, mock_admin, mock_firestore):
        mock_admin.get_app.return_value = MagicMock()
        with patch.object(extensions, '_firestore_client', None):
            extensions.get_firestore_client()
        mock_admin.initialize_app.assert_not_called()

    @patch('workin_analytics.extensions.firestore')
    @patch('workin_analytics.extensions.firebase_admin')
    def test_application_default_credentials(self, mock_admin, mock_firestore, caplog):
        mock_admin.get_app.side_effect = ValueError('no app')
        with patch.object(extensions, '_firestore_client', None), \
                patch.object(extensions, 'FIREBASE_CREDENTIALS', None), \
                patch.object(extensions, 'FIREBASE_PROJECT_ID', 'myworkin'):
            extensions.get_firestore_client()
        mock_admin.initialize_app.assert_called_once_with(options={'projectId': 'myworkin'})
        assert 'application default credentials' in caplog.text
