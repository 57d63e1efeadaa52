import pytest

from bgi_script_tool import cli
from bgi_script_tool.config import Config
from bgi_script_tool.script import Script


def test_export_single_file(sample_file, capsys):
    assert cli.main(['-e', str(sample_file)]) == 0

    text_path = sample_file.with_suffix('.txt')
    assert text_path.exists()
    assert text_path.read_text(encoding='utf-8').count('◆') == 6
    assert "Exporting text from scene01" in capsys.readouterr().out


def test_export_all(sample_file):
    assert cli.main(['-a', str(sample_file)]) == 0
    assert sample_file.with_suffix('.txt').read_text(encoding='utf-8').count('◆') == 10


def test_rebuild_writes_into_rebuild_folder(sample_file):
    assert cli.main(['-e', str(sample_file)]) == 0
    text_path = sample_file.with_suffix('.txt')
    text_path.write_text(
        text_path.read_text(encoding='utf-8').replace("◆0000001C◆さようなら", "◆0000001C◆またね"),
        encoding='utf-8'
    )

    assert cli.main(['-b', str(sample_file)]) == 0

    output = sample_file.parent / 'rebuild' / 'scene01'
    rebuilt = Script(Config(source_encoding='utf-8'))
    rebuilt.load(output)
    assert "またね" in [r.text for r in rebuilt.find_strings()]


def test_folder_batch_continues_after_failure(tmp_path, sample_bytes, capsys):
    (tmp_path / 'a').write_bytes(sample_bytes)
    (tmp_path / 'b').write_bytes(b"not a script\x00")
    (tmp_path / 'c').write_bytes(sample_bytes)
    (tmp_path / 'notes.txt').write_text("ignored", encoding='utf-8')

    assert cli.main(['-e', str(tmp_path), '--jobs', '2']) == 1

    assert (tmp_path / 'a.txt').exists()
    assert (tmp_path / 'c.txt').exists()
    assert not (tmp_path / 'b.txt').exists()
    out = capsys.readouterr().out
    assert "ERROR: b: Unsupported script version." in out
    assert "1 of 3 file(s) failed" in out


def test_rebuild_without_translation_fails(sample_file, capsys):
    assert cli.main(['-b', str(sample_file)]) == 1
    assert "ERROR: scene01" in capsys.readouterr().out


def test_iter_script_files_uses_extension(tmp_path):
    for name in ('x', 'y.bin', 'z.txt'):
        (tmp_path / name).write_bytes(b"")
    (tmp_path / 'rebuild').mkdir()

    assert [p.name for p in cli.iter_script_files(tmp_path, Config())] == ['x']
    assert [p.name for p in cli.iter_script_files(tmp_path, Config(script_extension='.bin'))] == ['y.bin']


def test_info(sample_file, capsys):
    assert cli.main(['-i', str(sample_file)]) == 0
    out = capsys.readouterr().out
    assert "Code section: 64 bytes" in out
    assert "String references: 5 (4 distinct)" in out


def test_missing_path(tmp_path, capsys):
    assert cli.main(['-e', str(tmp_path / 'missing')]) == 1
    assert "not found" in capsys.readouterr().out


def test_mode_is_required():
    with pytest.raises(SystemExit):
        cli.main([])


def test_rebuild_folder_continues_after_undecodable_translation(tmp_path, sample_bytes, capsys):
    (tmp_path / 'a').write_bytes(sample_bytes)
    (tmp_path / 'a.txt').write_bytes("◆00000004◆やあ\n".encode('cp932'))
    (tmp_path / 'b').write_bytes(sample_bytes)
    (tmp_path / 'b.txt').write_text("◆00000004◆やあ\n", encoding='utf-8')

    assert cli.main(['-b', str(tmp_path)]) == 1

    assert not (tmp_path / 'rebuild' / 'a').exists()
    rebuilt = Script(Config(source_encoding='utf-8'))
    rebuilt.load(tmp_path / 'rebuild' / 'b')
    assert rebuilt.find_strings()[0].text == "やあ"
    out = capsys.readouterr().out
    assert "ERROR: a: Translation file is not valid utf-8" in out
    assert "1 of 2 file(s) failed" in out
