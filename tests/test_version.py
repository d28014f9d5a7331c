import platform
import sys

from trustgate.version import get_info


def test_version_fields():
    info = get_info()
    assert info.version == "0.1.0"
    assert info.git_commit == "unknown"
    assert info.build_date == "unknown"


def test_runtime_fields():
    info = get_info()
    assert info.python_version == platform.python_version()
    assert info.platform.split("/")[0] == sys.platform


def test_info_is_stable():
    first = get_info()
    second = get_info()
    assert first.platform == second.platform
    assert first.platform.count("/") == 1
    assert second.version == "0.1.0"