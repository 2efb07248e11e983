"""
Page Routes

Serves the single-page client.
"""
from flask import Blueprint, current_app, render_template

import config

pages_bp = Blueprint('pages', __name__)


@pages_bp.route('/', methods=['GET'])
def index():
    language = current_app.config.get('LANGUAGE')
    return render_template(
        'index.html',
        language=language,
        messages=config.MESSAGES.get(language, config.MESSAGES['en']),
    )
