"""
Tests for the HTTP surface: page, health, upload, preview, predict.
"""
from io import BytesIO
from unittest.mock import patch

import pytest

import config
from app import create_app
from tests.conftest import make_png


def upload(client, data, filename='pet.png', mimetype='image/png'):
    return client.post(
        '/api/upload',
        data={'image': (BytesIO(data), filename, mimetype)},
        content_type='multipart/form-data',
    )


def test_index_page(client):
    response = client.get('/')

    assert response.status_code == 200
    assert b'accept="image/*"' in response.data
    assert b'id="predict"' in response.data


def test_index_page_in_spanish(model_path):
    app = create_app({
        'TESTING': True,
        'MODEL_PATH': model_path,
        'LOAD_MODEL_IN_BACKGROUND': False,
        'LANGUAGE': 'es',
    })

    page = app.test_client().get('/').get_data(as_text=True)

    assert config.MESSAGES['es']['title'] in page
    assert config.MESSAGES['es']['select_photo'] in page
    assert config.MESSAGES['es']['get_prediction'] in page
    assert config.MESSAGES['es']['preview_placeholder'] in page
    assert 'Select a photo' not in page
    assert 'Get prediction' not in page


def test_timeout_handler_not_registered(app):
    handlers = app.error_handler_spec[None]

    assert 408 not in handlers
    assert 413 in handlers


def test_create_app_registers_no_exit_hook(model_path):
    with patch('atexit.register') as register:
        create_app({
            'TESTING': True,
            'MODEL_PATH': model_path,
            'LOAD_MODEL_IN_BACKGROUND': False,
        })

    register.assert_not_called()


def test_health(client):
    data = client.get('/api/health').get_json()

    assert data['status'] == 'healthy'
    assert data['model_loaded'] is True
    assert data['model_state'] == 'ready'
    assert data['device'] == 'cpu' or data['device'].startswith('cuda')


def test_unknown_endpoint(client):
    assert client.get('/api/nope').status_code == 404


def test_initial_state(client):
    state = client.get('/api/state').get_json()

    assert state['model_state'] == 'ready'
    assert state['has_preview'] is False
    assert state['can_predict'] is False
    assert state['result'] is None


def test_predict_without_image(client):
    response = client.post('/api/predict')

    assert response.status_code == 400
    assert response.get_json()['error'] == config.MESSAGES['en']['no_image']


def test_upload_and_predict_dog(client, white_png):
    response = upload(client, white_png)
    assert response.status_code == 200
    assert response.get_json()['can_predict'] is True

    response = client.post('/api/predict')

    assert response.status_code == 200
    data = response.get_json()
    assert data['success'] is True
    assert data['result']['label'] == 'Dog'
    assert data['result']['confidence_text'] == '100.0%'


def test_upload_and_predict_cat(client, black_png):
    upload(client, black_png)

    data = client.post('/api/predict').get_json()

    assert data['result']['label'] == 'Cat'
    assert data['result']['confidence_text'] == '0.0%'


def test_preview(client, white_png):
    assert client.get('/api/preview').status_code == 404

    upload(client, white_png)
    response = client.get('/api/preview')

    assert response.status_code == 200
    assert response.mimetype == 'image/png'
    assert response.data == white_png


def test_new_upload_resets_result(app, client, white_png, black_png):
    upload(client, white_png)
    client.post('/api/predict')
    store = app.config['SESSION_STORE']
    (session,) = store._sessions.values()
    first_preview = session.preview

    state = upload(client, black_png).get_json()

    assert state['result'] is None
    assert state['error'] is None
    assert first_preview.released


def test_non_image_upload_rejected(client):
    response = upload(client, b'plain text', filename='notes.txt', mimetype='text/plain')

    assert response.status_code == 415
    assert response.get_json()['error'] == config.MESSAGES['en']['unsupported_media_type']


def test_upload_without_file(client):
    response = client.post('/api/upload', data={}, content_type='multipart/form-data')

    assert response.status_code == 400


def test_undecodable_image_gives_generic_failure(client, white_png):
    upload(client, white_png)
    assert client.post('/api/predict').status_code == 200
    upload(client, b'\x89PNG broken', filename='broken.png')

    response = client.post('/api/predict')

    assert response.status_code == 500
    assert response.get_json()['error'] == config.MESSAGES['en']['inference_failed']
    state = client.get('/api/state').get_json()
    assert state['result'] is None
    assert state['error'] == config.MESSAGES['en']['inference_failed']


def test_file_too_large(model_path):
    app = create_app({
        'TESTING': True,
        'MODEL_PATH': model_path,
        'LOAD_MODEL_IN_BACKGROUND': False,
        'MAX_CONTENT_LENGTH': 1024,
    })

    response = upload(app.test_client(), make_png((10, 20, 30), size=(512, 512)) + b'\0' * 2048)

    assert response.status_code == 413


def test_close_session_releases_preview(app, client, white_png):
    upload(client, white_png)
    store = app.config['SESSION_STORE']
    (session,) = store._sessions.values()
    preview = session.preview

    data = client.post('/api/session/close').get_json()

    assert data['closed'] is True
    assert preview.released
    assert len(store) == 0


def test_delete_session(client, white_png):
    upload(client, white_png)

    assert client.delete('/api/session').get_json()['closed'] is True
    assert client.delete('/api/session').get_json()['closed'] is False


def test_sessions_are_isolated(app, white_png):
    first = app.test_client()
    second = app.test_client()

    upload(first, white_png)

    assert second.get('/api/state').get_json()['has_preview'] is False
    assert second.post('/api/predict').status_code == 400


class TestModelNotReady:

    @pytest.fixture
    def failed_app(self, tmp_path):
        app = create_app({
            'TESTING': True,
            'MODEL_PATH': tmp_path / 'missing.pt',
            'LOAD_MODEL_IN_BACKGROUND': True,
            'LANGUAGE': 'es',
        })
        app.config['CLASSIFICATION_SERVICE'].model_loader.wait(timeout=30)
        return app

    def test_state_reports_failed(self, failed_app):
        state = failed_app.test_client().get('/api/state').get_json()

        assert state['model_state'] == 'failed'
        assert state['model_status'] == config.MESSAGES['es']['model_failed']
        assert state['can_predict'] is False

    def test_predict_refused(self, failed_app, white_png):
        client = failed_app.test_client()
        upload(client, white_png)

        response = client.post('/api/predict')

        assert response.status_code == 503
        assert response.get_json()['error'] == config.MESSAGES['es']['model_not_ready']

    def test_synchronous_load_failure_propagates(self, tmp_path):
        with pytest.raises(RuntimeError):
            create_app({
                'TESTING': True,
                'MODEL_PATH': tmp_path / 'missing.pt',
                'LOAD_MODEL_IN_BACKGROUND': False,
            })
