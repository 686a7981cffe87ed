import subprocess
import sys
from pathlib import Path

from PIL import Image, ImageDraw

from cquant.file_utils import read_cquant_metadata

CLI_SCRIPT = Path(__file__).resolve().parent.parent / "cquantgen.py"


def create_dummy_image(path: Path):
    img = Image.new("RGB", (64, 64), color=(150, 120, 200))
    draw = ImageDraw.Draw(img)
    draw.rectangle([(10, 10), (40, 40)], fill=(200, 50, 50))
    draw.ellipse([(30, 30), (60, 60)], fill=(50, 200, 50))
    img.save(path)


def run_cli(*args):
    return subprocess.run(
        [sys.executable, str(CLI_SCRIPT), *map(str, args)],
        capture_output=True,
        text=True,
    )


def test_cquantgen_cli_with_legend(tmp_path):
    input_image = tmp_path / "dummy_input.bmp"
    create_dummy_image(input_image)
    output_image = tmp_path / "out" / "quantized.png"
    legend_image = tmp_path / "out" / "legend.png"

    result = run_cli(input_image, output_image, "--num-colors", "2", "--legend", legend_image)

    assert result.returncode == 0, f"CLI failed: {result.stderr}"
    assert output_image.exists()
    assert legend_image.exists()
    assert "Completed" in result.stdout
    assert "Palette: 2 colors" in result.stdout

    metadata = read_cquant_metadata(output_image)
    assert metadata["NumColors"] == "2"
    assert metadata["Metric"] == "euclidean"
    assert "cquantgen.py" in metadata["command_line"]


def test_cquantgen_cli_bucketing_to_bmp(tmp_path):
    input_image = tmp_path / "dummy_input.png"
    create_dummy_image(input_image)
    output_image = tmp_path / "quantized.bmp"

    result = run_cli(input_image, output_image, "-n", "3", "--strategy", "bucketing")

    assert result.returncode == 0, f"CLI failed: {result.stderr}"
    with Image.open(output_image) as im:
        assert im.format == "BMP"
        assert im.size == (64, 64)


def test_cquantgen_cli_rejects_too_many_colors(tmp_path):
    input_image = tmp_path / "dummy_input.png"
    create_dummy_image(input_image)
    output_image = tmp_path / "quantized.bmp"

    result = run_cli(input_image, output_image, "--num-colors", "10")

    assert result.returncode == 1
    assert "exceeds the number of distinct colors" in result.stdout
    assert not output_image.exists()


def test_cquantgen_cli_refuses_to_overwrite(tmp_path):
    input_image = tmp_path / "dummy_input.png"
    create_dummy_image(input_image)
    output_image = tmp_path / "quantized.bmp"
    output_image.write_bytes(b"existing")

    result = run_cli(input_image, output_image, "-n", "2")

    assert result.returncode == 1
    assert "already exist" in result.stdout
    assert output_image.read_bytes() == b"existing"


def test_cquantgen_cli_help_output():
    result = run_cli("--help")
    assert result.returncode == 0
    assert "usage" in result.stdout.lower()


def test_cquantgen_cli_rejects_lossy_output(tmp_path):
    input_image = tmp_path / "dummy_input.png"
    create_dummy_image(input_image)
    output_image = tmp_path / "quantized.jpg"

    result = run_cli(input_image, output_image, "-n", "2")

    assert result.returncode == 1
    assert "JPEG" in result.stdout
    assert not output_image.exists()
