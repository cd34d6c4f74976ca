"""
Tests for the command-line front end.

Test Coverage:
- plan prints rectangles as JSON
- split writes to a gallery or runs dry
- Exit codes for errors
"""

import json

import pytest

from pixert.cli import EXIT_ERROR, EXIT_OK, main
from pixert.export import DirectoryGallery


def _stdout_json(capsys):
    return json.loads(capsys.readouterr().out)


def test_plan_prints_rectangles(photo_path, capsys):
    code = main(["plan", str(photo_path), "--splits", "3", "--ratio", "4:5"])

    assert code == EXIT_OK
    out = _stdout_json(capsys)
    assert out["image"] == {"width": 240, "height": 320}
    assert out["constraint"] == "width"
    assert [r["x"] for r in out["rectangles"]] == [0, 80, 160]


def test_plan_bottom_alignment(photo_path, capsys):
    main(["plan", str(photo_path), "-n", "3", "--align", "bottom"])

    rect = _stdout_json(capsys)["rectangles"][0]
    assert rect["y"] + rect["height"] == 320


def test_plan_custom_alignment(photo_path, capsys):
    main([
        "plan", str(photo_path), "-n", "3",
        "--align", "custom", "--drag-offset", "20", "--preview-height", "160",
    ])

    assert _stdout_json(capsys)["rectangles"][0]["y"] == 40


def test_plan_custom_alignment_without_drag_is_centred(photo_path, capsys):
    main(["plan", str(photo_path), "-n", "3", "--align", "custom"])

    rect = _stdout_json(capsys)["rectangles"][0]
    # 80x100 tiles in a 240x320 photo
    assert rect["y"] == 110
    assert 320 - (rect["y"] + rect["height"]) == 110


def test_plan_vertical_offset_overrides_alignment(photo_path, capsys):
    main(["plan", str(photo_path), "-n", "3", "--align", "bottom", "--vertical-offset", "0"])

    assert _stdout_json(capsys)["rectangles"][0]["y"] == 0


def test_split_dry_run(photo_path, capsys):
    code = main(["split", str(photo_path), "-n", "2", "--ratio", "1:1", "--dry-run"])

    assert code == EXIT_OK
    out = _stdout_json(capsys)
    assert out["status"] == "complete"
    assert len(out["tiles"]) == 2


def test_split_into_gallery(photo_path, tmp_path, capsys):
    gallery = tmp_path / "gallery"

    code = main([
        "split", str(photo_path), "-n", "3",
        "--gallery", str(gallery), "--collection", "Road Trip",
    ])

    assert code == EXIT_OK
    manifest = json.loads(DirectoryGallery(gallery).manifest_path("Road Trip").read_text())
    assert manifest["assets"] == [t["asset_id"] for t in _stdout_json(capsys)["tiles"]]
    assert len(list((gallery / "assets").iterdir())) == 3


def test_split_uses_config_file(photo_path, tmp_path, capsys):
    config = tmp_path / "export.json"
    config.write_text(json.dumps({"collection_name": "From Config", "output_format": "PNG"}))

    code = main(["split", str(photo_path), "-n", "2", "--dry-run", "--config", str(config)])

    assert code == EXIT_OK
    assert _stdout_json(capsys)["collection_name"] == "From Config"


def test_missing_image_exits_with_error(tmp_path):
    assert main(["plan", str(tmp_path / "missing.jpg"), "-n", "3"]) == EXIT_ERROR


def test_invalid_split_count_exits_with_error(photo_path):
    assert main(["plan", str(photo_path), "-n", "1"]) == EXIT_ERROR


def test_bad_config_exits_with_error(photo_path, tmp_path):
    config = tmp_path / "export.json"
    config.write_text(json.dumps({"colour": "red"}))

    assert main(["split", str(photo_path), "-n", "2", "--dry-run", "--config", str(config)]) == EXIT_ERROR


def test_split_requires_a_target(photo_path):
    with pytest.raises(SystemExit):
        main(["split", str(photo_path), "-n", "2"])


def test_config_with_wrong_value_type_exits_with_error(photo_path, tmp_path):
    config = tmp_path / "export.json"
    config.write_text(json.dumps({"quality": "95"}))

    assert main(["split", str(photo_path), "-n", "2", "--dry-run", "--config", str(config)]) == EXIT_ERROR
