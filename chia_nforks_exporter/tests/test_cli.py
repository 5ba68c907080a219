"""
Tests for the command line entry point
"""

from unittest.mock import patch

from click.testing import CliRunner

from chia_nforks_exporter.cli import cli


class TestCli:
    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "chia_exporter_nforks" in result.output
        assert "1.0.0" in result.output

    def test_missing_config_exits_nonzero(self, tmp_path):
        result = CliRunner().invoke(cli, ["--config", str(tmp_path / "missing.yaml"), "--quiet"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_serves_configured_port(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "port: 9200\n"
            "coins:\n"
            "  chia:\n"
            "    host: localhost\n"
            "    full-node-port: 8555\n"
            "    wallet-port: 9256\n"
            "    farmer-port: 8559\n"
            "    harvester-port: 8560\n"
        )

        with patch("chia_nforks_exporter.cli.serve") as serve, \
                patch("chia_nforks_exporter.cli.REGISTRY") as registry:
            result = CliRunner().invoke(cli, ["--config", str(path), "--no-probe", "--quiet"])

        assert result.exit_code == 0, result.output
        registry.register.assert_called_once()
        serve.assert_called_once_with(9200, "", registry)
