"""
Classification Routes

Endpoints for image upload, preview, prediction and session state.
"""
import logging
import uuid
from io import BytesIO

from flask import Blueprint, current_app, jsonify, request, session, send_file, abort

from core.errors import InferenceFailedError, NoImageSelectedError

classification_bp = Blueprint('classification', __name__)
logger = logging.getLogger(__name__)

SESSION_KEY = 'classifier_sid'


def _session_id(create=True):
    sid = session.get(SESSION_KEY)
    if sid is None and create:
        sid = uuid.uuid4().hex
        session[SESSION_KEY] = sid
    return sid


def _current_session():
    store = current_app.config['SESSION_STORE']
    return store.get_or_create(_session_id())


@classification_bp.route('/state', methods=['GET'])
def get_state():
    """Current session state: model status, preview, result and error."""
    return jsonify(_current_session().snapshot())


@classification_bp.route('/upload', methods=['POST'])
def upload_image():
    """
    Select the image to classify.

    Expects:
        - Form data with 'image' file field (an image/* MIME type)

    Returns:
        JSON session state with the new preview; result and error cleared
    """
    if 'image' not in request.files:
        raise NoImageSelectedError()

    file = request.files['image']
    if file.filename == '':
        raise NoImageSelectedError()

    classifier_session = _current_session()
    classifier_session.select_image(file.read(), file.mimetype, filename=file.filename)

    state = classifier_session.snapshot()
    state['success'] = True
    return jsonify(state)


@classification_bp.route('/preview', methods=['GET'])
def get_preview():
    """Serve the bytes of the currently selected image."""
    preview = _current_session().preview
    if preview is None:
        abort(404)

    response = send_file(BytesIO(preview.data), mimetype=preview.mimetype)
    response.headers['Cache-Control'] = 'no-store'
    return response


@classification_bp.route('/predict', methods=['POST'])
def predict():
    """
    Classify the selected image as dog or cat.

    Returns:
        JSON with:
        - success: bool
        - result: {'label', 'score', 'confidence', 'confidence_text', 'inference_time'}
        - error: Localized message (if refused or failed)
    """
    classifier_session = _current_session()
    result = classifier_session.run_prediction()
    if result is None:
        raise InferenceFailedError()

    state = classifier_session.snapshot()
    state['success'] = True
    return jsonify(state)


@classification_bp.route('/session', methods=['DELETE'])
@classification_bp.route('/session/close', methods=['POST'])
def close_session():
    """Release the session's preview and state (page teardown)."""
    sid = _session_id(create=False)
    closed = False
    if sid is not None:
        closed = current_app.config['SESSION_STORE'].discard(sid)
        session.pop(SESSION_KEY, None)
    return jsonify({'success': True, 'closed': closed})
