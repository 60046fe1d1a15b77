import pytest

from threatscope.utils.config import Config, init_config
from threatscope.utils.logger import reset_logging


@pytest.fixture(autouse=True)
def default_config(tmp_path, monkeypatch):
    """Fresh default configuration, isolated from any real config.yaml or TS_* vars."""
    for var in Config.ENV_OVERRIDES:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(Config, "_find_config_file", lambda self: None)
    config = init_config()
    yield config
    reset_logging()


def make_pe_like(*strings, noise=b"\x00\x01\xfe\xff"):
    """Fake executable bytes: an MZ stub followed by strings separated by binary noise."""
    data = b"MZ\x90\x00\x03\x00\x00\x00" + noise
    for s in strings:
        data += s.encode("ascii") + noise
    return data


@pytest.fixture
def pe_bytes():
    return make_pe_like(
        "This program cannot be run in DOS mode.",
        "kernel32.dll",
        "USER32.dll",
        "cryptonet.dll",
        "hookmgr.dll",
        "helper.dll",
        "kernel32.dll",
    )


@pytest.fixture
def make_pe():
    return make_pe_like
