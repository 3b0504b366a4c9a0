"""
===============================================================================
QUATKIT - Command Line Test Suite
===============================================================================
Runs quatkit.cli.main() in-process and checks printed results and exit codes.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import numpy as np
import pytest
from numpy.testing import assert_allclose

import quatkit.config as config_module
from quatkit.cli import main


@pytest.fixture(autouse=True)
def default_config(tmp_path, monkeypatch):
    """Isolate every test from the repository's config file."""
    monkeypatch.setattr(config_module, 'DEFAULT_CONFIG_PATHS', (tmp_path / 'absent.yaml',))


def run(capsys, *argv):
    """Run the CLI and return (exit code, parsed numeric output rows)."""
    code = main(list(argv))
    out = capsys.readouterr().out
    rows = [[float(v) for v in line.split()] for line in out.splitlines()]
    return code, rows


# =============================================================================
# Test: Commands
# =============================================================================

class TestCommands:
    """Each subcommand prints the result of the matching operation."""

    def test_from_euler(self, capsys):
        code, rows = run(capsys, 'from-euler', '0', '0', '1.5707963267948966')
        assert code == 0
        assert_allclose(rows[0], [np.cos(np.pi / 4), 0.0, 0.0, np.sin(np.pi / 4)], atol=1e-9)

    def test_euler(self, capsys):
        """(1, 1, 0, 0) normalizes to a 90-degree roll."""
        code, rows = run(capsys, 'euler', '1', '1', '0', '0')
        assert code == 0
        assert_allclose(rows[0], [np.pi / 2, 0.0, 0.0], atol=1e-9)

    def test_rotmat_identity(self, capsys):
        code, rows = run(capsys, 'rotmat', '1', '0', '0', '0')
        assert code == 0
        assert_allclose(rows, np.eye(3), atol=0.0)

    def test_prod_is_ordered(self, capsys):
        _, rows = run(capsys, 'prod', '-q', '0', '1', '0', '0', '-q', '0', '0', '1', '0')
        assert_allclose(rows[0], [0.0, 0.0, 0.0, 1.0])
        _, rows = run(capsys, 'prod', '-q', '0', '0', '1', '0', '-q', '0', '1', '0', '0')
        assert_allclose(rows[0], [0.0, 0.0, 0.0, -1.0])

    def test_sum(self, capsys):
        _, rows = run(capsys, 'sum', '-q', '1', '2', '3', '4',
                      '--quaternion', '0.5', '0.5', '0.5', '0.5')
        assert_allclose(rows[0], [1.5, 2.5, 3.5, 4.5])

    def test_prod_negative_components(self, capsys):
        """Operands may start with a negative number: (-1) * i = -i."""
        code, rows = run(capsys, 'prod', '-q', '-1', '0', '0', '0', '-q', '0', '1', '0', '0')
        assert code == 0
        assert_allclose(rows[0], [0.0, -1.0, 0.0, 0.0])

    def test_sum_negative_components(self, capsys):
        code, rows = run(capsys, 'sum', '-q', '-0.5', '-1', '0', '-2.5')
        assert code == 0
        assert_allclose(rows[0], [-0.5, -1.0, 0.0, -2.5])

    def test_unit(self, capsys):
        _, rows = run(capsys, 'unit', '0', '3', '0', '4')
        assert_allclose(rows[0], [0.0, 0.6, 0.0, 0.8], atol=1e-9)

    def test_inv(self, capsys):
        _, rows = run(capsys, 'inv', '2', '0', '0', '0')
        assert_allclose(rows[0], [0.5, 0.0, 0.0, 0.0])

    def test_conj(self, capsys):
        _, rows = run(capsys, 'conj', '1', '2', '3', '4')
        assert_allclose(rows[0], [1.0, -2.0, -3.0, -4.0])

    def test_norm(self, capsys):
        _, rows = run(capsys, 'norm', '1', '2', '2', '4')
        assert_allclose(rows[0], [5.0])


# =============================================================================
# Test: Options
# =============================================================================

class TestOptions:
    """Angle units, precision, and checked mode."""

    def test_degrees_input(self, capsys):
        _, rows = run(capsys, '--degrees', 'from-euler', '90', '0', '0')
        assert_allclose(rows[0], [np.cos(np.pi / 4), np.sin(np.pi / 4), 0.0, 0.0], atol=1e-9)

    def test_degrees_output(self, capsys):
        _, rows = run(capsys, '--degrees', 'euler', '0.7071067811865476', '0', '0',
                      '0.7071067811865476')
        assert_allclose(rows[0], [0.0, 0.0, 90.0], atol=1e-6)

    def test_degrees_from_config(self, capsys, tmp_path):
        path = tmp_path / 'deg.yaml'
        path.write_text("angles:\n  units: degrees\n")
        _, rows = run(capsys, '--config', str(path), 'from-euler', '0', '180', '0')
        assert_allclose(rows[0], [0.0, 0.0, 1.0, 0.0], atol=1e-9)

    def test_precision_from_config(self, capsys, tmp_path):
        path = tmp_path / 'short.yaml'
        path.write_text("output:\n  precision: 2\n")
        assert main(['--config', str(path), 'conj', '1', '2', '3', '4']) == 0
        assert capsys.readouterr().out.strip() == "1.00 -2.00 -3.00 -4.00"

    def test_unchecked_zero_prints_nan(self, capsys):
        assert main(['unit', '0', '0', '0', '0']) == 0
        assert capsys.readouterr().out.split() == ['nan'] * 4

    def test_checked_zero_fails(self, capsys, caplog):
        assert main(['--checked', 'unit', '0', '0', '0', '0']) == 1
        assert capsys.readouterr().out == ''
        assert "near-zero" in caplog.text

    @pytest.mark.parametrize("command", ['euler', 'rotmat', 'inv'])
    def test_checked_from_config(self, capsys, tmp_path, command):
        path = tmp_path / 'checked.yaml'
        path.write_text("checked: true\n")
        assert main(['--config', str(path), command, '0', '0', '0', '0']) == 1


# =============================================================================
# Test: Argument and config errors
# =============================================================================

class TestErrors:
    """Malformed input exits non-zero."""

    @pytest.mark.parametrize("argv", [
        ['prod'],
        ['prod', '-q', '1', '2', '3'],
        ['sum', '-q', 'a', 'b', 'c', 'd'],
        ['prod', '0,1,0,0'],
    ])
    def test_bad_operands(self, capsys, argv):
        with pytest.raises(SystemExit) as excinfo:
            main(argv)
        assert excinfo.value.code == 2

    def test_missing_command(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 2

    def test_missing_config_file(self, capsys, tmp_path, caplog):
        assert main(['--config', str(tmp_path / 'nope.yaml'), 'norm', '1', '0', '0', '0']) == 1
        assert "Configuration error" in caplog.text

    def test_invalid_config_file(self, capsys, tmp_path):
        path = tmp_path / 'bad.yaml'
        path.write_text("angles:\n  units: gradians\n")
        assert main(['--config', str(path), 'norm', '1', '0', '0', '0']) == 1

    def test_unwritable_log_file(self, capsys, tmp_path, caplog):
        """A log file in a missing directory is a configuration error, not a crash."""
        path = tmp_path / 'logfile.yaml'
        path.write_text(f"logging:\n  file: {tmp_path / 'no_such_dir' / 'quatkit.log'}\n")
        assert main(['--config', str(path), 'norm', '1', '0', '0', '0']) == 1
        assert capsys.readouterr().out == ''
        assert "Cannot open log file" in caplog.text
