from pathlib import Path

from click.testing import CliRunner

from notebridge.cli import _alembic_config, main


def test_commands_are_registered():
    result = CliRunner().invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "serve" in result.output
    assert "db" in result.output

    result = CliRunner().invoke(main, ["db", "--help"])
    for command in ("upgrade", "downgrade", "migrate", "current", "history"):
        assert command in result.output


def test_alembic_config_points_at_packaged_migrations():
    cfg = _alembic_config()
    script_location = Path(cfg.get_main_option("script_location"))
    assert (script_location / "env.py").is_file()
    assert (script_location / "versions" / "0001_initial.py").is_file()
