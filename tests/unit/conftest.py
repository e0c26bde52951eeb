import pytest

KNOWN_DEVICES = {"lo": 1, "eth0": 2, "eth1": 3}


@pytest.fixture(autouse=True)
def known_devices(monkeypatch):
    """Resolve interface names against a fixed table instead of the host."""

    def _if_nametoindex(name):
        try:
            return KNOWN_DEVICES[name]
        except KeyError:
            raise OSError(19, "No such device") from None

    monkeypatch.setattr("xdp_cpumap.core.config.socket.if_nametoindex", _if_nametoindex)
    return KNOWN_DEVICES
