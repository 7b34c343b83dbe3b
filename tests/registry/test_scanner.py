"""Tests for the modulepath scanner."""

from __future__ import annotations

from pathlib import Path

import pytest

from modfiles.registry.scanner import is_valid_module_name, scan_modulepath


class TestIsValidModuleName:
    @pytest.mark.parametrize("name", ["ntp", "my_module", "apache2", "Mod-1"])
    def test_valid(self, name: str) -> None:
        """Letters, digits, underscores and dashes, not leading with a symbol."""
        assert is_valid_module_name(name) is True

    @pytest.mark.parametrize(
        "name",
        ["", ".hidden", "_private", "a/b", "..", "-dash", "ntp\n", "ntp\n\n", " ntp"],
    )
    def test_invalid(self, name: str) -> None:
        """The whole name must match, including any trailing newline."""
        assert is_valid_module_name(name) is False


class TestScanModulepath:
    def test_empty_root(self, tmp_path: Path) -> None:
        """An empty root yields no modules."""
        assert scan_modulepath([str(tmp_path)]) == []

    def test_missing_root_skipped(self, tmp_path: Path) -> None:
        """Roots that do not exist are skipped."""
        assert scan_modulepath([str(tmp_path / "missing")]) == []

    def test_directories_only(self, tmp_path: Path) -> None:
        """Only directories are modules."""
        (tmp_path / "ntp").mkdir()
        (tmp_path / "README").write_text("not a module")
        result = scan_modulepath([str(tmp_path)])
        assert [m.name for m in result] == ["ntp"]
        assert result[0].dir_path == tmp_path / "ntp"
        assert result[0].root == tmp_path

    def test_hidden_and_underscore_skipped(self, tmp_path: Path) -> None:
        """Hidden and underscore-prefixed directories are not modules."""
        for name in (".git", "_build", "__pycache__", "ok"):
            (tmp_path / name).mkdir()
        assert [m.name for m in scan_modulepath([str(tmp_path)])] == ["ok"]

    def test_first_root_wins_on_duplicates(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A duplicate in a later root is skipped with a warning."""
        first, second = tmp_path / "first", tmp_path / "second"
        (first / "ntp").mkdir(parents=True)
        (second / "ntp").mkdir(parents=True)
        (second / "ssh").mkdir()
        result = scan_modulepath([str(first), str(second)])
        found = [(m.name, m.root) for m in result]
        assert found == [("ntp", first), ("ssh", second)]
        assert "Duplicate module 'ntp'" in caplog.text
