from nvidia_dl.core.discovery import hardware
from nvidia_dl.core.discovery.hardware import PCI_IDS_URL, _gpu_id_from_sysfs, detect_gpu_name, parse_pci_ids

from .conftest import FakeResponse, FakeSession

PCI_IDS = """\
# pci.ids sample
10de  NVIDIA Corporation
\t1c03  GP106 [GeForce GTX 1060 6GB]
\t2204  GA102 [GeForce RTX 3090]
\t\t10de 147d  GeForce RTX 3090 Founders Edition
\t2231  GA102GL [RTX A5000]
\t1eb8  TU104GL Tesla T4
10df  Emulex Corporation
\t2204  Something Else
"""


def test_parse_pci_ids_bracket_name():
    assert parse_pci_ids(PCI_IDS, "2204") == "GeForce RTX 3090"
    assert parse_pci_ids(PCI_IDS, "1C03") == "GeForce GTX 1060 6GB"


def test_parse_pci_ids_plain_name():
    assert parse_pci_ids(PCI_IDS, "1eb8") == "TU104GL Tesla T4"


def test_parse_pci_ids_other_vendor_or_unknown():
    text = PCI_IDS.replace("\t2204  GA102 [GeForce RTX 3090]\n", "")
    assert parse_pci_ids(text, "2204") is None
    assert parse_pci_ids(PCI_IDS, "ffff") is None


def _pci_dev(root, name, vendor, klass, device):
    d = root / name
    d.mkdir()
    (d / "vendor").write_text(vendor + "\n")
    (d / "class").write_text(klass + "\n")
    (d / "device").write_text(device + "\n")


def test_sysfs_finds_nvidia_display(tmp_path):
    _pci_dev(tmp_path, "0000:00:02.0", "0x8086", "0x030000", "0x3e92")
    _pci_dev(tmp_path, "0000:01:00.1", "0x10de", "0x040300", "0x1aef")  # HDMI audio
    _pci_dev(tmp_path, "0000:01:00.0", "0x10de", "0x030000", "0x2204")
    assert _gpu_id_from_sysfs(tmp_path) == "2204"


def test_sysfs_missing(tmp_path):
    assert _gpu_id_from_sysfs(tmp_path / "nope") is None


def test_detect_gpu_name(monkeypatch):
    monkeypatch.setattr(hardware, "get_gpu_id", lambda: "2204")
    s = FakeSession(routes={PCI_IDS_URL: FakeResponse(200, text=PCI_IDS)})
    assert detect_gpu_name(session=s) == "GeForce RTX 3090"


def test_detect_gpu_name_without_device(monkeypatch):
    monkeypatch.setattr(hardware, "get_gpu_id", lambda: None)
    s = FakeSession(routes={PCI_IDS_URL: FakeResponse(200, text=PCI_IDS)})
    assert detect_gpu_name(session=s) is None


def test_detect_gpu_name_offline(monkeypatch):
    monkeypatch.setattr(hardware, "get_gpu_id", lambda: "2204")
    s = FakeSession(default=FakeResponse(500))
    assert detect_gpu_name(session=s) is None
