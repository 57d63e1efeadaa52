"""
BGI Script Tool Flask Server

Features:
- Export the text of an uploaded script as a translation file
- Rebuild an uploaded script from an uploaded translation file
- Section summary of an uploaded script
- JSON error responses for malformed uploads
"""

import os
import re
from dataclasses import asdict
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple

from flask import Flask, request, jsonify, send_file, Response
from werkzeug.utils import secure_filename

from bgi_script_tool.config import Config
from bgi_script_tool.script import Script, FormatError, SCRIPT_VERSION
from bgi_script_tool.script.translation import reading_encoding

app = Flask(__name__)

# Configuration
app.config['MAX_CONTENT_LENGTH'] = 64 * 1024 * 1024  # 64MB max upload
app.config['SCRIPT_CONFIG'] = None  # Path to config.json, None for defaults

SCRIPT_MAGIC = SCRIPT_VERSION.encode('ascii') + b'\x00'
TRUE_VALUES = {'1', 'true', 'yes', 'on'}


def get_config() -> Config:
    """Load the script configuration for this app."""
    path = app.config.get('SCRIPT_CONFIG')
    return Config.load(Path(path) if path else None)


def sanitize_filename(filename: str) -> str:
    """Sanitize filename to prevent path traversal."""
    filename = secure_filename(filename)
    filename = re.sub(r'[^\w\-_\.]', '_', filename)
    if len(filename) > 255:
        name, ext = os.path.splitext(filename)
        filename = name[:250] + ext
    return filename


def validate_script_magic(data: bytes) -> Optional[str]:
    """Return an error message if the data does not start with the version tag."""
    if len(data) < len(SCRIPT_MAGIC):
        return "File too small"
    if not data.startswith(SCRIPT_MAGIC):
        return "Not a BurikoCompiledScriptVer1.00 script"
    return None


def load_uploaded_script(field: str = 'script') -> Tuple[Optional[Script], str, Optional[Tuple[Response, int]]]:
    """
    Read and parse an uploaded script.

    Returns:
        Tuple of (script, sanitized filename, error response)
    """
    if field not in request.files:
        return None, '', (jsonify({'error': 'No script uploaded'}), 400)

    upload = request.files[field]
    filename = sanitize_filename(upload.filename or '') or 'script'
    data = upload.read()

    error = validate_script_magic(data)
    if error:
        return None, filename, (jsonify({'error': f'Invalid file: {error}'}), 400)

    script = Script(get_config())
    try:
        script.parse(data)
    except FormatError as e:
        return None, filename, (jsonify({'error': str(e)}), 400)

    return script, filename, None


# ============== API ==============

@app.route('/api/export', methods=['POST'])
def api_export():
    """Export the strings of an uploaded script as a translation file."""
    script, filename, error = load_uploaded_script()
    if error:
        return error

    export_all = request.form.get('all', '').lower() in TRUE_VALUES
    config = script.config
    text = script.export_text(export_all)
    app.logger.info('Exported text from %s (all=%s)', filename, export_all)

    return send_file(
        BytesIO(text.encode(config.text_encoding)),
        mimetype='text/plain',
        as_attachment=True,
        download_name=f'{filename}{config.text_extension}'
    )


@app.route('/api/rebuild', methods=['POST'])
def api_rebuild():
    """Rebuild an uploaded script from an uploaded translation file."""
    script, filename, error = load_uploaded_script()
    if error:
        return error

    if 'translation' not in request.files:
        return jsonify({'error': 'No translation file uploaded'}), 400

    raw = request.files['translation'].read()
    encoding = script.config.text_encoding
    try:
        text = raw.decode(reading_encoding(encoding))
    except UnicodeDecodeError:
        return jsonify({'error': f'Translation file must be {encoding}'}), 400

    try:
        count = script.import_text(text)
    except FormatError as e:
        return jsonify({'error': str(e)}), 400

    app.logger.info('Rebuilt %s with %d translated line(s)', filename, count)

    return send_file(
        BytesIO(script.to_bytes()),
        mimetype='application/octet-stream',
        as_attachment=True,
        download_name=filename
    )


@app.route('/api/inspect', methods=['POST'])
def api_inspect():
    """Describe the sections of an uploaded script."""
    script, filename, error = load_uploaded_script()
    if error:
        return error

    return jsonify({'filename': filename, **asdict(script.summary())})


@app.route('/api/docs')
def api_docs():
    """API documentation."""
    return jsonify({
        'name': 'BGI Script Tool API',
        'version': '1.0.0',
        'endpoints': {
            'POST /api/export': {
                'description': 'Export script text as a translation file',
                'content_type': 'multipart/form-data',
                'fields': {
                    'script': 'compiled script file',
                    'all': 'true to export every string, including ASCII and empty ones'
                }
            },
            'POST /api/rebuild': {
                'description': 'Rebuild a script from a translation file',
                'content_type': 'multipart/form-data',
                'fields': {
                    'script': 'compiled script file',
                    'translation': 'edited translation file in the configured text encoding'
                }
            },
            'POST /api/inspect': {
                'description': 'Section sizes and string counts',
                'content_type': 'multipart/form-data',
                'fields': {'script': 'compiled script file'}
            }
        },
        'limits': {
            'max_upload_size': '64 MB'
        }
    })


@app.errorhandler(413)
def too_large(e):
    return jsonify({'error': 'Upload exceeds size limit'}), 413


if __name__ == '__main__':
    print("=" * 60)
    print("BGI Script Tool Server")
    print("=" * 60)
    print("API Docs: http://localhost:5000/api/docs")
    print("=" * 60)

    app.run(host='0.0.0.0', port=5000, debug=False, threaded=True)
