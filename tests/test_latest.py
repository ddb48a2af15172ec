import pytest

from nvidia_dl.core.discovery.latest import lookup_url, parse_driver_page, resolve_latest, version_from_url
from nvidia_dl.core.errors import Unreachable
from nvidia_dl.core.models import CatalogEntry, Channel, DriverDescriptor, Edition, WindowsTarget

from .conftest import FakeResponse, FakeSession

GPU = CatalogEntry("GeForce RTX 3090", 120, 930)
PAGE_URL = "https://www.nvidia.com/download/driverResults.aspx/190000/en-us"
PAGE = (
    '<a href="/content/DriverDownloads/confirmation.php?url=/Windows/516.59/'
    '516.59-desktop-win10-win11-64bit-international-dch-whql.exe&lang=us&type=TITAN">'
)
LINK = "https://international.download.nvidia.com/Windows/516.59/516.59-desktop-win10-win11-64bit-international-dch-whql.exe"


def test_lookup_url_codes():
    d = DriverDescriptor(channel=Channel.STUDIO, edition=Edition.STD, windows_target=WindowsTarget.WIN10)
    u = lookup_url(GPU, d)
    assert "psid=120&pfid=930" in u
    assert "osid=57" in u and "whql=4" in u and "dtcid=0" in u
    assert "osid=135" in lookup_url(GPU, DriverDescriptor()) and "whql=1" in lookup_url(GPU, DriverDescriptor())


def test_parse_driver_page():
    assert parse_driver_page(PAGE) == LINK
    assert parse_driver_page("<html>no link</html>") is None


def test_version_from_url():
    assert version_from_url(LINK) == "516.59"
    assert version_from_url("https://example.com/x.exe") == ""


def test_resolve_latest():
    s = FakeSession(routes={
        lookup_url(GPU, DriverDescriptor()): FakeResponse(200, text=PAGE_URL + "\r\n"),
        PAGE_URL: FakeResponse(200, text=PAGE),
    })
    assert resolve_latest(GPU, DriverDescriptor(), session=s) == LINK


def test_resolve_latest_no_driver():
    s = FakeSession(routes={lookup_url(GPU, DriverDescriptor()): FakeResponse(200, text="No certified downloads")})
    with pytest.raises(Unreachable):
        resolve_latest(GPU, DriverDescriptor(), session=s)


def test_resolve_latest_page_without_link():
    s = FakeSession(routes={
        lookup_url(GPU, DriverDescriptor()): FakeResponse(200, text=PAGE_URL),
        PAGE_URL: FakeResponse(200, text="<html></html>"),
    })
    with pytest.raises(Unreachable):
        resolve_latest(GPU, DriverDescriptor(), session=s)


def test_resolve_latest_http_error():
    s = FakeSession(default=FakeResponse(500))
    with pytest.raises(Unreachable):
        resolve_latest(GPU, DriverDescriptor(), session=s)
