"""Tests for platform detection functionality."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from broth.bootstrap.platform import (
    get_platform_info,
    PlatformInfo,
    detect_os,
    detect_arch,
    normalize_arch,
    SUPPORTED_OS,
    SUPPORTED_ARCH,
)


@pytest.fixture(autouse=True)
def clear_platform_cache():
    get_platform_info.cache_clear()
    yield
    get_platform_info.cache_clear()


class TestDetectOS:
    """Tests for OS detection."""

    def test_detect_os_darwin(self) -> None:
        with patch("platform.system", return_value="Darwin"):
            assert detect_os() == "darwin"

    def test_detect_os_linux(self) -> None:
        with patch("platform.system", return_value="Linux"):
            assert detect_os() == "linux"

    def test_detect_os_windows(self) -> None:
        with patch("platform.system", return_value="Windows"):
            assert detect_os() == "windows"

    def test_detect_os_unknown_raises(self) -> None:
        with patch("platform.system", return_value="UnknownOS"):
            with pytest.raises(ValueError, match="Unsupported operating system"):
                detect_os()


class TestDetectArch:
    """Tests for architecture detection."""

    def test_detect_arch_x86_64(self) -> None:
        with patch("platform.machine", return_value="x86_64"):
            assert detect_arch() == "amd64"

    def test_detect_arch_i686(self) -> None:
        with patch("platform.machine", return_value="i686"):
            assert detect_arch() == "386"

    def test_detect_arch_aarch64(self) -> None:
        with patch("platform.machine", return_value="aarch64"):
            assert detect_arch() == "arm64"

    def test_detect_arch_unknown_raises(self) -> None:
        with patch("platform.machine", return_value="mips"):
            with pytest.raises(ValueError, match="Unsupported architecture"):
                detect_arch()


class TestNormalizeArch:
    """Tests for architecture normalization."""

    @pytest.mark.parametrize(
        "machine,expected",
        [
            ("x86_64", "amd64"),
            ("AMD64", "amd64"),
            ("x86", "386"),
            ("i386", "386"),
            ("arm64", "arm64"),
            ("aarch64", "arm64"),
        ],
    )
    def test_known_architectures(self, machine: str, expected: str) -> None:
        assert normalize_arch(machine) == expected

    def test_normalize_unknown(self) -> None:
        assert normalize_arch("unknown") is None


class TestPlatformInfo:
    """Tests for PlatformInfo dataclass."""

    def test_slug(self) -> None:
        info = PlatformInfo(os="darwin", arch="arm64")
        assert info.slug == "darwin-arm64"

    def test_executable_suffix(self) -> None:
        assert PlatformInfo(os="windows", arch="amd64").executable_suffix == ".exe"
        assert PlatformInfo(os="linux", arch="amd64").executable_suffix == ""

    def test_supported_sets(self) -> None:
        assert SUPPORTED_OS == {"darwin", "linux", "windows"}
        assert SUPPORTED_ARCH == {"386", "amd64", "arm64"}


class TestGetPlatformInfo:
    """Tests for get_platform_info function."""

    def test_detects_platform(self) -> None:
        with patch("platform.system", return_value="Linux"):
            with patch("platform.machine", return_value="x86_64"):
                info = get_platform_info()
                assert info == PlatformInfo(os="linux", arch="amd64")

    def test_detection_is_cached(self) -> None:
        with patch("platform.system", return_value="Darwin"):
            with patch("platform.machine", return_value="arm64"):
                first = get_platform_info()
        with patch("platform.system", return_value="Linux"):
            with patch("platform.machine", return_value="x86_64"):
                assert get_platform_info() is first
