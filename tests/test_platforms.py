import pytest

from recipe_capture.acquisition.platforms import Platform, detect_platform, has_media
from recipe_capture.core.errors import UnsupportedPlatform


@pytest.mark.parametrize("url, platform", [
    ("https://www.youtube.com/watch?v=abc", Platform.YOUTUBE),
    ("https://youtu.be/abc", Platform.YOUTUBE),
    ("https://m.youtube.com/shorts/abc", Platform.YOUTUBE),
    ("https://www.tiktok.com/@chef/video/123", Platform.TIKTOK),
    ("https://vm.tiktok.com/ZM123/", Platform.TIKTOK),
    ("https://www.instagram.com/reel/abc/", Platform.INSTAGRAM),
    ("https://www.facebook.com/watch/?v=1", Platform.FACEBOOK),
    ("https://fb.watch/abc/", Platform.FACEBOOK),
    ("https://www.pinterest.com/pin/123/", Platform.PINTEREST),
    ("https://www.pinterest.co.uk/pin/123/", Platform.PINTEREST),
    ("https://pin.it/abc", Platform.PINTEREST),
    ("https://www.seriouseats.com/best-chili", Platform.WEBSITE),
    ("  https://example.com/recipe  ", Platform.WEBSITE),
])
def test_detect_platform(url, platform):
    assert detect_platform(url) == platform


def test_lookalike_host_is_a_website():
    assert detect_platform("https://notyoutube.com/watch") == Platform.WEBSITE


@pytest.mark.parametrize("url", ["", "   ", "not a url", "ftp://youtube.com/x", "https://", "mailto:chef@example.com"])
def test_unusable_urls_are_rejected(url):
    with pytest.raises(UnsupportedPlatform):
        detect_platform(url)


def test_empty_url_reason():
    with pytest.raises(UnsupportedPlatform) as exc:
        detect_platform("")
    assert exc.value.reason == "URL is required"


def test_has_media():
    assert has_media(Platform.TIKTOK)
    assert has_media(Platform.YOUTUBE)
    assert not has_media(Platform.WEBSITE)
    assert not has_media(Platform.PINTEREST)
