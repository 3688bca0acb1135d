import os
from pathlib import Path

import pytest


def _write_sample_app(mod_dir: Path) -> None:
    (mod_dir / "go.mod").write_text("module sample\n\ngo 1.18\n", encoding="utf-8")

    # A stand-in for the framework package so no network access is needed.
    revel_dir = mod_dir / "revel"
    revel_dir.mkdir()
    (revel_dir / "revel.go").write_text(
        "\n".join(
            [
                "package revel",
                "",
                "type Result interface{}",
                "",
                "type Validation struct{}",
                "",
                "func (v *Validation) Required(obj interface{}) {}",
                "",
                "type Controller struct {",
                "    Validation *Validation",
                "}",
                "",
                "func (c *Controller) Render(args ...interface{}) Result { return nil }",
                "",
            ]
        ),
        encoding="utf-8",
    )

    models_dir = mod_dir / "app" / "models"
    models_dir.mkdir(parents=True)
    (models_dir / "user.go").write_text(
        "\n".join(
            [
                "package models",
                "",
                "type User struct {",
                "    Name string",
                "}",
                "",
            ]
        ),
        encoding="utf-8",
    )

    controllers_dir = mod_dir / "app" / "controllers"
    controllers_dir.mkdir(parents=True)
    (controllers_dir / "users.go").write_text(
        "\n".join(
            [
                "package controllers",
                "",
                "import (",
                '    "sample/app/models"',
                '    "sample/app/routes"',
                '    "sample/revel"',
                ")",
                "",
                "var _ = routes.Users",
                "",
                "type Users struct {",
                "    *revel.Controller",
                "}",
                "",
                "func (c Users) List(user *models.User) revel.Result {",
                "    c.Validation.Required(user.Name)",
                "    return c.Render(user)",
                "}",
                "",
                "func init() {}",
                "",
                # Deeply left-nested expression, as found in generated asset code.
                "func big() string { return " + " + ".join(['"x"'] * 2000) + " }",
                "",
            ]
        ),
        encoding="utf-8",
    )


@pytest.mark.skipif(
    os.environ.get("GOSRCINFO_INTEGRATION") != "1",
    reason="set GOSRCINFO_INTEGRATION=1 to run integration tests",
)
def test_scan_sample_app(tmp_path: Path):
    from gosrcinfo.aliases import AliasCache
    from gosrcinfo.config import ScanConfig
    from gosrcinfo.process import process_source

    mod_dir = tmp_path / "sample"
    mod_dir.mkdir()
    _write_sample_app(mod_dir)

    cache = AliasCache(config=ScanConfig(framework_import_paths=("sample/revel",)))
    info = process_source(mod_dir / "app", cache=cache)

    (users,) = info.struct_specs
    assert users.qualified_name == "sample/app/controllers.Users"
    (action,) = users.method_specs
    assert action.name == "List"
    assert action.args[0].import_path == "sample/app/models"
    assert [r.line for r in action.render_calls] == [17]

    assert dict(info.validation_keys["sample/app/controllers.Users.List"]) == {16: "user.Name"}
    assert info.init_import_paths == ("sample/app/controllers",)
    assert cache.get("sample/app/models") == "models"
    assert "sample/app/routes" not in cache
    assert [s.struct_name for s in info.controller_specs("sample/revel")] == ["Users"]
