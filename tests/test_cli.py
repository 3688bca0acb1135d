from __future__ import annotations

import json
from pathlib import Path


def _info():
    from gosrcinfo.sourceinfo import MethodSpec, SourceInfo, TypeInfo

    return SourceInfo(
        struct_specs=(
            TypeInfo(
                struct_name="App",
                import_path="sample/app/controllers",
                package_name="controllers",
                method_specs=(
                    MethodSpec(name="Index", receiver="App", import_path="sample/app/controllers", package_name="controllers"),
                ),
            ),
        ),
        validation_keys={"sample/app/controllers.App.Save": {12: "user.Name"}},
        init_import_paths=("sample/app/controllers",),
    )


def test_scan_prints_summary(monkeypatch, tmp_path: Path, capsys):
    from gosrcinfo import cli, process

    seen: list[tuple[Path, str | None]] = []

    def fake_process_source(root, *, import_path=None, cache=None, config=None):  # noqa: ANN001
        seen.append((root, import_path))
        return _info()

    monkeypatch.setattr(process, "process_source", fake_process_source)
    cli.main(["scan", "--dir", str(tmp_path), "--import-path", "sample/app"])

    assert seen == [(tmp_path, "sample/app")]
    out = json.loads(capsys.readouterr().out)
    assert out["structs"][0]["name"] == "sample/app/controllers.App"
    assert out["structs"][0]["methods"][0]["name"] == "Index"
    assert out["validation_keys"] == {"sample/app/controllers.App.Save": {"12": "user.Name"}}
    assert out["init_import_paths"] == ["sample/app/controllers"]


def test_scan_writes_msgpack(monkeypatch, tmp_path: Path):
    from gosrcinfo import cli, process
    from gosrcinfo.codec import decode_source_info

    monkeypatch.setattr(process, "process_source", lambda root, **kwargs: _info())
    out_file = tmp_path / "srcinfo.msgpack"
    cli.main(["scan", "--dir", str(tmp_path), "--out", str(out_file)])

    decoded = decode_source_info(out_file.read_bytes())
    assert [s.struct_name for s in decoded.struct_specs] == ["App"]


def test_scan_reports_errors_as_exit(monkeypatch, tmp_path: Path):
    import pytest

    from gosrcinfo import cli, process
    from gosrcinfo.errors import SourceParseError

    def boom(root, **kwargs):  # noqa: ANN001
        raise SourceParseError("expected '}'", filename="app.go", line=3, column=1)

    monkeypatch.setattr(process, "process_source", boom)
    with pytest.raises(SystemExit, match=r"app.go:3:1"):
        cli.main(["scan", "--dir", str(tmp_path)])
