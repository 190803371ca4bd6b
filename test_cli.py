"""
Tests for the command-line entry point and the batch tool.

Run with: pytest test_cli.py -v
"""

import json
import os
import sys

import pytest
from PIL import Image

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'tools'))

import generate_batch as batch_tool
from plumage.batch import batch_names, generate_batch
from plumage.cli import main
from plumage.params import ParamsError, parse_params

SMALL = {
    'dimensions': {'width': 10, 'height': 6},
    'spread': {'Square': {'width': 2}},
}


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestMain:
    def test_writes_image_and_params(self, workdir):
        (workdir / 'params').write_text(json.dumps(SMALL))
        main(['pic', '--quiet'])

        saved = parse_params((workdir / 'pic.params').read_text())
        assert saved.dimensions == (10, 6)
        with Image.open(workdir / 'pic.bmp') as img:
            assert img.size == (10, 6)

    def test_saved_params_regenerate_same_image(self, workdir):
        (workdir / 'params').write_text(json.dumps(SMALL))
        main(['first', '--quiet'])
        main(['second', '--quiet', '--params', 'first.params'])
        assert (workdir / 'first.bmp').read_bytes() == (workdir / 'second.bmp').read_bytes()
        assert (workdir / 'first.params').read_text() == (workdir / 'second.params').read_text()

    def test_progress_output(self, workdir, capsys):
        (workdir / 'params').write_text(json.dumps(SMALL))
        main(['pic'])
        out = capsys.readouterr().out
        assert "Generating 10x6 image..." in out
        assert "Filled 6/6 rows" in out
        assert "Saved image: pic.bmp" in out

    def test_bad_params_exit(self, workdir, capsys):
        (workdir / 'params').write_text('{"gamma": "bright"}')
        with pytest.raises(SystemExit) as exc:
            main(['pic', '--quiet'])
        assert exc.value.code == 1
        assert capsys.readouterr().err.startswith("error: invalid params:")
        assert not (workdir / 'pic.bmp').exists()

    def test_missing_explicit_params_exit(self, workdir, capsys):
        with pytest.raises(SystemExit) as exc:
            main(['pic', '--params', 'nope.params'])
        assert exc.value.code == 1
        assert "could not read params file" in capsys.readouterr().err

    def test_unwritable_output_exit(self, workdir, capsys):
        (workdir / 'params').write_text(json.dumps(SMALL))
        with pytest.raises(SystemExit) as exc:
            main([str(workdir / 'missing_dir' / 'pic'), '--quiet'])
        assert exc.value.code == 1
        assert "could not write output" in capsys.readouterr().err

    def test_missing_name_is_usage_error(self, workdir):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 2


class TestBatch:
    def test_generates_numbered_bitmaps(self, tmp_path):
        images = generate_batch(tmp_path / 'out', 3, json.dumps(SMALL), verbose=False)
        assert [p.name for p in images] == ['out1.bmp', 'out2.bmp', 'out3.bmp']
        assert (tmp_path / 'out' / 'out2.params').exists()
        # Each image gets its own random seed.
        assert images[0].read_bytes() != images[1].read_bytes()

    def test_png_conversion(self, tmp_path):
        images = generate_batch(tmp_path, 10, json.dumps(SMALL), png=True, verbose=False)
        assert images[0].name == 'out01.png'
        assert images[-1].name == 'out10.png'
        assert not list(tmp_path.glob('*.bmp'))
        with Image.open(images[0]) as img:
            assert img.format == 'PNG'
            assert img.size == (10, 6)

    def test_parallel_jobs_write_same_files(self, tmp_path):
        serial = generate_batch(tmp_path / 'serial', 4, json.dumps(SMALL), verbose=False, jobs=1)
        parallel = generate_batch(tmp_path / 'parallel', 4, json.dumps(SMALL), verbose=False, jobs=2)
        assert [p.name for p in parallel] == [p.name for p in serial]
        assert (sorted(p.name for p in (tmp_path / 'parallel').iterdir())
                == sorted(p.name for p in (tmp_path / 'serial').iterdir()))
        for path in parallel:
            with Image.open(path) as img:
                assert img.size == (10, 6)

    def test_parallel_jobs_keep_fixed_seed(self, tmp_path):
        fixed = dict(SMALL, seed=list(range(32)), start_color={'red': 0.1, 'green': 0.6, 'blue': 0.3})
        images = generate_batch(tmp_path, 3, json.dumps(fixed), verbose=False, jobs=2)
        reference = generate_batch(tmp_path / 'ref', 1, json.dumps(fixed), verbose=False)
        for path in images:
            assert path.read_bytes() == reference[0].read_bytes()

    def test_invalid_params_write_nothing(self, tmp_path):
        with pytest.raises(ParamsError):
            generate_batch(tmp_path / 'out', 3, '{"gamma": "bright"}', verbose=False, jobs=2)
        assert not (tmp_path / 'out').exists()

    def test_jobs_below_one_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            generate_batch(tmp_path, 1, json.dumps(SMALL), verbose=False, jobs=0)

    def test_names_padded_to_count_width(self, tmp_path):
        names = batch_names(tmp_path, 100)
        assert os.path.basename(names[0]) == 'out001'
        assert os.path.basename(names[-1]) == 'out100'

    def test_command_line_jobs(self, workdir, capsys):
        (workdir / 'params').write_text(json.dumps(SMALL))
        batch_tool.main(['imgs', '2', '--jobs', '2', '--png'])
        out = capsys.readouterr().out
        assert "Generating 2 images (2 jobs)..." in out
        assert "Done!" in out
        assert sorted(p.name for p in (workdir / 'imgs').iterdir()) == [
            'out1.params', 'out1.png', 'out2.params', 'out2.png']

    def test_command_line_rejects_zero_jobs(self, workdir):
        with pytest.raises(SystemExit) as exc:
            batch_tool.main(['imgs', '2', '--jobs', '0'])
        assert exc.value.code == 2
