"""
命令行接口测试
"""

import json

import pytest
import yaml
from click.testing import CliRunner

from cli.main import main
from core.models.latitude_correction import LatitudeCorrection, LatitudeCorrectionRow
from storage.table_storage import write_correction_table
from tests.conftest import ISS_LINE1, ISS_LINE2, make_tle_text


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def run_config(tmp_path):
    """真实SGP4传播的小规模配置：1天、60分钟步长、5°网格"""
    tle = tmp_path / "iss.txt"
    tle.write_text(f"{ISS_LINE1}\n{ISS_LINE2}\n", encoding="utf-8")
    config = {
        "satellites": [{"id": "iss", "tle_path": "iss.txt"}],
        "simulation": {
            "start_date": "2019-12-10",
            "period_count": 1,
            "period_length_days": 1,
            "step_minutes": 60,
        },
        "footprint": {"nadir_only": True},
        "grid": {"cell_size": 5},
        "execution": {"max_workers": 1},
        "output": {"directory": "out"},
        "logging": {"level": "WARNING"},
    }
    path = tmp_path / "overpass.yaml"
    path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return path


class TestMain:
    """命令组测试"""

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("run", "catalog", "lookup"):
            assert command in result.output


class TestRunCommand:
    """run命令测试"""

    def test_run(self, runner, run_config, tmp_path):
        result = runner.invoke(main, ["run", "--config", str(run_config)])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "out" / "aqua-terra-overpasses-per-day.asc").exists()
        summary = json.loads((tmp_path / "out" / "run-summary.json").read_text(encoding="utf-8"))
        assert summary["sample_count"] == 25
        assert summary["config"]["satellites"][0]["id"] == "iss"

    def test_invalid_config(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"simulation": {"start_date": "2019-01-01"}}), encoding="utf-8")
        result = runner.invoke(main, ["run", "--config", str(path)])
        assert result.exit_code != 0
        assert "Invalid configuration" in result.output

    def test_step_not_dividing_a_day(self, runner, run_config):
        config = yaml.safe_load(run_config.read_text(encoding="utf-8"))
        config["simulation"]["step_minutes"] = 7
        run_config.write_text(yaml.safe_dump(config), encoding="utf-8")
        result = runner.invoke(main, ["run", "--config", str(run_config)])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert "step_minutes" in result.output
        assert not isinstance(result.exception, ValueError)

    def test_missing_tle_file(self, runner, run_config):
        (run_config.parent / "iss.txt").unlink()
        result = runner.invoke(main, ["run", "--config", str(run_config)])
        assert result.exit_code != 0
        assert "iss.txt" in result.output


class TestCatalogCommand:
    """catalog命令测试"""

    def test_summary(self, runner, tmp_path):
        path = tmp_path / "aqua.txt"
        path.write_text(make_tle_text(["19001.00000000", "19002.50000000"]), encoding="utf-8")
        result = runner.invoke(main, ["catalog", str(path), "--satellite", "aqua"])
        assert result.exit_code == 0, result.output
        assert "aqua" in result.output
        assert "2019-01-02T12:00:00" in result.output
        assert "NORAD 27424" in result.output

    def test_satellite_count_mismatch(self, runner, tmp_path):
        path = tmp_path / "aqua.txt"
        path.write_text(make_tle_text(["19001.00000000"]), encoding="utf-8")
        result = runner.invoke(main, ["catalog", str(path), "-s", "aqua", "-s", "terra"])
        assert result.exit_code != 0

    def test_malformed_file(self, runner, tmp_path):
        path = tmp_path / "broken.txt"
        path.write_text("not a tle\n", encoding="utf-8")
        result = runner.invoke(main, ["catalog", str(path)])
        assert result.exit_code != 0


class TestLookupCommand:
    """lookup命令测试"""

    @pytest.fixture
    def table(self, tmp_path):
        correction = LatitudeCorrection([
            LatitudeCorrectionRow(0.0, 2.0, 1.5, 2.5),
            LatitudeCorrectionRow(0.25, 4.0, 3.0, 5.0),
        ])
        return write_correction_table(correction, tmp_path / "table.csv")

    def test_lookup_and_correct(self, runner, table):
        result = runner.invoke(main, ["lookup", str(table), "--lat", "0.2", "--count", "10"])
        assert result.exit_code == 0, result.output
        assert "4.0000" in result.output
        assert "2.5000" in result.output

    def test_latitude_out_of_range(self, runner, table):
        result = runner.invoke(main, ["lookup", str(table), "--lat", "95"])
        assert result.exit_code != 0

    def test_latitude_beyond_table(self, runner, table):
        result = runner.invoke(main, ["lookup", str(table), "--lat", "60"])
        assert result.exit_code != 0
        assert "No correction band" in result.output
