import pytest


@pytest.mark.parametrize(
    ("import_path", "role"),
    [
        ("sample/app/controllers", "controller"),
        ("sample/app/controllers/admin", "controller"),
        ("sample/app/tests", "test"),
        ("sample/app/tests/unit", "test"),
        ("sample/app/models", "plain"),
        ("sample/app/mycontrollers", "plain"),
        ("sample/app/controllers/tests", "controller"),
        ("controllers", "plain"),
    ],
)
def test_package_role(import_path: str, role: str):
    from gosrcinfo.roles import package_role

    assert package_role(import_path).value == role


def test_markers_are_configurable():
    from gosrcinfo.config import ScanConfig
    from gosrcinfo.roles import is_controller_package, is_test_package

    cfg = ScanConfig(controllers_marker="handlers", tests_marker="specs")
    assert is_controller_package("sample/app/handlers", cfg)
    assert not is_controller_package("sample/app/controllers", cfg)
    assert is_test_package("sample/app/specs/api", cfg)
