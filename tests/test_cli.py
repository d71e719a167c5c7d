from click.testing import CliRunner

from floodscene.cli import cli


def test_export_offline(tmp_path):
    output = tmp_path / "scene.glb"
    result = CliRunner().invoke(cli, ['export', str(output), '--offline', '-w', '4.5'])
    assert result.exit_code == 0, result.output
    assert output.read_bytes()[:4] == b'glTF'
    assert "0 buildings" in result.output


def test_export_rejects_bad_water_level(tmp_path):
    result = CliRunner().invoke(cli, ['export', str(tmp_path / "x.glb"), '-w', '40'])
    assert result.exit_code != 0
    assert not (tmp_path / "x.glb").exists()
