"""Unit tests for delete and check commands.

Tests for the CLI delete and check command implementations.
"""

import json
from pathlib import Path

from safedelete.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


class TestDeleteCommand:
    """Tests for safedelete delete command."""

    def test_delete_help(self) -> None:
        """Delete command shows help."""
        result = runner.invoke(app, ["delete", "--help"])
        assert result.exit_code == 0
        assert "--directory" in result.stdout

    def test_delete_single_file(self, allowed_dir: Path) -> None:
        """A single file inside the allowed directory is deleted."""
        target = allowed_dir / "a.txt"

        result = runner.invoke(app, ["-a", str(allowed_dir), "delete", str(target)])

        assert result.exit_code == 0
        assert f"Successfully deleted: {target}" in result.stdout
        assert not target.exists()

    def test_delete_protected_file(self, allowed_dir: Path) -> None:
        """A protected file is kept and the command fails."""
        target = allowed_dir / ".env.local"

        result = runner.invoke(app, ["-a", str(allowed_dir), "delete", str(target)])

        assert result.exit_code == 1
        assert "Path matches protected pattern" in result.output
        assert target.exists()

    def test_delete_custom_pattern(self, allowed_dir: Path) -> None:
        """--protect replaces the configured patterns."""
        target = allowed_dir / "a.txt"

        result = runner.invoke(
            app, ["-a", str(allowed_dir), "-p", "*.txt", "delete", str(target)]
        )

        assert result.exit_code == 1
        assert target.exists()

    def test_delete_batch(self, allowed_dir: Path) -> None:
        """Several files are deleted as one batch."""
        paths = [str(allowed_dir / "a.txt"), str(allowed_dir / "b.txt")]

        result = runner.invoke(app, ["-a", str(allowed_dir), "delete", *paths])

        assert result.exit_code == 0
        assert "Successfully deleted: 2 files" in result.stdout
        assert not (allowed_dir / "a.txt").exists()

    def test_delete_batch_cancelled(self, allowed_dir: Path) -> None:
        """One protected path cancels the batch."""
        paths = [str(allowed_dir / "a.txt"), str(allowed_dir / ".git" / "config")]

        result = runner.invoke(app, ["-a", str(allowed_dir), "delete", *paths])

        assert result.exit_code == 1
        assert "Operation cancelled" in result.output
        assert (allowed_dir / "a.txt").exists()

    def test_delete_directory(self, allowed_dir: Path) -> None:
        """--directory removes an empty directory."""
        target = allowed_dir / "empty"

        result = runner.invoke(app, ["-a", str(allowed_dir), "delete", "-d", str(target)])

        assert result.exit_code == 0
        assert not target.exists()

    def test_delete_non_empty_directory(self, allowed_dir: Path) -> None:
        """--directory refuses a non-empty directory."""
        target = allowed_dir / "src"

        result = runner.invoke(app, ["-a", str(allowed_dir), "delete", "-d", str(target)])

        assert result.exit_code == 1
        assert "Failed to delete" in result.output
        assert target.exists()

    def test_directory_takes_one_path(self, allowed_dir: Path) -> None:
        """--directory with several paths is an error."""
        result = runner.invoke(
            app,
            ["-a", str(allowed_dir), "delete", "-d", str(allowed_dir / "empty"), "/x"],
        )

        assert result.exit_code == 1
        assert "exactly one path" in result.output

    def test_delete_requires_allowed_directory(self, tmp_path: Path) -> None:
        """Without allowed directories nothing can be deleted."""
        target = tmp_path / "a.txt"
        target.write_text("a")

        result = runner.invoke(app, ["delete", str(target)])

        assert result.exit_code == 1
        assert "At least one allowed directory" in result.output
        assert target.exists()

    def test_delete_with_config_file(self, allowed_dir: Path, tmp_path: Path) -> None:
        """Allowed directories can come from a config file."""
        config = tmp_path / "custom.toml"
        config.write_text(f'allowed_directories = ["{allowed_dir}"]\n')
        target = allowed_dir / "b.txt"

        result = runner.invoke(app, ["-c", str(config), "delete", str(target)])

        assert result.exit_code == 0
        assert not target.exists()

    def test_missing_config_file(self, tmp_path: Path) -> None:
        """An explicit config file that doesn't exist is an error."""
        result = runner.invoke(app, ["-c", str(tmp_path / "nope.toml"), "delete", "/x"])

        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestCheckCommand:
    """Tests for safedelete check command."""

    def test_check_valid(self, allowed_dir: Path) -> None:
        """Valid paths pass the check and nothing is deleted."""
        target = allowed_dir / "a.txt"

        result = runner.invoke(app, ["-a", str(allowed_dir), "check", str(target)])

        assert result.exit_code == 0
        assert target.exists()

    def test_check_json(self, allowed_dir: Path) -> None:
        """JSON output partitions the paths."""
        paths = [str(allowed_dir / "a.txt"), str(allowed_dir / ".git"), "/etc/hosts"]

        result = runner.invoke(app, ["-a", str(allowed_dir), "check", "--json", *paths])

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["valid"] is False
        assert data["validPaths"] == [paths[0]]
        assert data["protectedPaths"] == [
            {"path": paths[1], "reason": "Path matches protected pattern"}
        ]
        assert data["invalidPaths"] == [
            {"path": "/etc/hosts", "reason": "Path is outside allowed directories"}
        ]
