import json

import pytest

from flatbind import __main__ as cli
from flatbind import logging as flatbind_logging
from tests.utils import pixel_document, record, schema_document, union_type, field


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    # keep the flatbind logger propagating so other tests can use caplog
    monkeypatch.setattr(flatbind_logging, "configure_logging", lambda *args, **kwargs: None)
    monkeypatch.delenv("FLATBIND_CONFIG", raising=False)


def _write(tmp_path, document, name="schema.json"):
    path = tmp_path / name
    path.write_text(json.dumps(document), encoding="utf-8")
    return str(path)


def _run(argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    return excinfo.value.code


def test_generate(tmp_path):
    schema_path = _write(tmp_path, pixel_document())
    out_dir = tmp_path / "out"

    assert _run(["generate", schema_path, "-o", str(out_dir)]) == 0

    header = (out_dir / "pixel_ue4_generated.h").read_text(encoding="utf-8")
    assert "class UFBMyGame_Pixel : public UObject {" in header


def test_generate_uses_config_file(tmp_path):
    schema_path = _write(tmp_path, pixel_document())
    config_path = tmp_path / "flatbind.toml"
    config_path.write_text('[generator]\nreference_prefix = "UGame"\nfile_suffix = "_bp"\n', encoding="utf-8")

    assert _run(["generate", schema_path, "-o", str(tmp_path), "-c", str(config_path)]) == 0

    assert "class UGameMyGame_Pixel" in (tmp_path / "pixel_bp.h").read_text(encoding="utf-8")


def test_generate_unrepresentable_schema_fails(tmp_path):
    document = schema_document(records=[record("Monster", [field("gear", union_type("Equipment"))])])
    schema_path = _write(tmp_path, document)

    assert _run(["generate", schema_path, "-o", str(tmp_path / "out")]) == 1
    assert not (tmp_path / "out").exists()


def test_generate_invalid_document_fails(tmp_path):
    schema_path = _write(tmp_path, {"records": []})

    assert _run(["generate", schema_path, "-o", str(tmp_path)]) == 1


def test_make_rule(tmp_path, capsys):
    document = pixel_document()
    document["included_files"] = ["color.fbs"]
    schema_path = _write(tmp_path, document)

    assert _run(["make-rule", schema_path, "-o", "gen", "--schema-path", "pixel.fbs"]) == 0

    assert capsys.readouterr().out.strip() == "gen/pixel_ue4_generated.h: pixel.fbs color.fbs"


def test_runtime_header(tmp_path):
    assert _run(["runtime-header", "-o", str(tmp_path)]) == 0

    assert "CreateScalarVector" in (tmp_path / "flatbuffers_ue4.h").read_text(encoding="utf-8")


def test_subcommand_is_required():
    assert _run([]) == 2
