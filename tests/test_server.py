from io import BytesIO

import pytest

from bgi_script_tool.config import Config
from bgi_script_tool.script import Script
import server


@pytest.fixture
def client():
    server.app.config['TESTING'] = True
    with server.app.test_client() as client:
        yield client


def upload(data: bytes, name: str = 'scene01'):
    return (BytesIO(data), name)


def test_export(client, sample_bytes):
    response = client.post('/api/export', data={'script': upload(sample_bytes)},
                           content_type='multipart/form-data')
    assert response.status_code == 200
    text = response.data.decode('utf-8')
    assert "◆00000004◆こんにちは" in text
    assert "Hello" not in text
    assert 'scene01.txt' in response.headers['Content-Disposition']


def test_export_all(client, sample_bytes):
    response = client.post('/api/export', data={'script': upload(sample_bytes), 'all': 'true'},
                           content_type='multipart/form-data')
    assert "◆00000010◆Hello" in response.data.decode('utf-8')


def test_rebuild(client, sample_bytes):
    translation = "\ufeff◆00000004◆やあ\r\n".encode('utf-8')
    response = client.post('/api/rebuild', data={
        'script': upload(sample_bytes),
        'translation': (BytesIO(translation), 'scene01.txt'),
    }, content_type='multipart/form-data')
    assert response.status_code == 200

    script = Script(Config(source_encoding='utf-8'))
    script.parse(response.data)
    assert script.find_strings()[0].text == "やあ"


def test_rebuild_unknown_offset(client, sample_bytes):
    response = client.post('/api/rebuild', data={
        'script': upload(sample_bytes),
        'translation': (BytesIO("◆00000123◆x\n".encode('utf-8')), 'scene01.txt'),
    }, content_type='multipart/form-data')
    assert response.status_code == 400
    assert "00000123" in response.get_json()['error']


def test_rebuild_requires_translation(client, sample_bytes):
    response = client.post('/api/rebuild', data={'script': upload(sample_bytes)},
                           content_type='multipart/form-data')
    assert response.status_code == 400


def test_inspect(client, sample_bytes):
    response = client.post('/api/inspect', data={'script': upload(sample_bytes)},
                           content_type='multipart/form-data')
    payload = response.get_json()
    assert payload['code_size'] == 64
    assert payload['reference_count'] == 5
    assert payload['filename'] == 'scene01'


def test_rejects_non_script(client):
    response = client.post('/api/inspect', data={'script': upload(b"PK\x03\x04 archive")},
                           content_type='multipart/form-data')
    assert response.status_code == 400
    assert 'Invalid file' in response.get_json()['error']


def test_missing_upload(client):
    response = client.post('/api/export', data={}, content_type='multipart/form-data')
    assert response.status_code == 400


def test_docs(client):
    assert '/api/export' in ' '.join(client.get('/api/docs').get_json()['endpoints'])


@pytest.fixture
def cp932_client(tmp_path, client):
    config_path = tmp_path / 'config.json'
    Config(text_encoding='cp932').save(config_path)
    server.app.config['SCRIPT_CONFIG'] = str(config_path)
    yield client
    server.app.config['SCRIPT_CONFIG'] = None


def test_export_and_rebuild_share_text_encoding(cp932_client, sample_bytes):
    exported = cp932_client.post('/api/export', data={'script': upload(sample_bytes)},
                                 content_type='multipart/form-data')
    text = exported.data.decode('cp932')
    assert "◆00000004◆こんにちは" in text

    edited = text.replace("◆00000004◆こんにちは", "◆00000004◆やあ").encode('cp932')
    response = cp932_client.post('/api/rebuild', data={
        'script': upload(sample_bytes),
        'translation': (BytesIO(edited), 'scene01.txt'),
    }, content_type='multipart/form-data')
    assert response.status_code == 200

    script = Script(Config(source_encoding='utf-8'))
    script.parse(response.data)
    assert script.find_strings()[0].text == "やあ"


def test_rebuild_rejects_undecodable_translation(client, sample_bytes):
    response = client.post('/api/rebuild', data={
        'script': upload(sample_bytes),
        'translation': (BytesIO("◆00000004◆やあ\n".encode('cp932')), 'scene01.txt'),
    }, content_type='multipart/form-data')
    assert response.status_code == 400
    assert 'utf-8' in response.get_json()['error']
